from .auth import auth_bp
from .appointment import appointment_bp
from .session import session_bp
from .check_in import check_in_bp
from .video import video_bp
from .health import health_bp

__all__ = ['auth_bp', 'appointment_bp', 'session_bp', 'check_in_bp', 'video_bp', 'health_bp']

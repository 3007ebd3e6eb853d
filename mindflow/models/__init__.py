from .enums import (
    UserRole,
    SessionStatus,
    SessionType,
    SessionMode,
    CancelledBy,
    RiskLevel,
    PrimaryConcern,
)
from .user import User
from .patient import Patient
from .doctor import Doctor
from .session import Session, NOTE_FIELD_LIMITS
from .check_in import CheckIn
from .audit_log import AuditLog

__all__ = [
    "UserRole", "SessionStatus", "SessionType", "SessionMode", "CancelledBy", "RiskLevel", "PrimaryConcern",
    "User", "Patient", "Doctor", "Session", "NOTE_FIELD_LIMITS", "CheckIn", "AuditLog",
]

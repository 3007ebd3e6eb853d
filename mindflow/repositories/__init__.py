from .session_repository import SessionRepository
from .directory_repository import DirectoryRepository
from .check_in_repository import CheckInRepository

__all__ = ["SessionRepository", "DirectoryRepository", "CheckInRepository"]

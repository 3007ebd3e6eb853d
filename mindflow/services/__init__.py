from .exceptions import (
    MindflowError,
    RequestValidationError,
    SlotUnavailable,
    InvalidTransition,
    IdentifierUnavailable,
    NotOwner,
    RoleNotAllowed,
    DoctorNotApproved,
    DoctorNotFound,
    DoctorProfileMissing,
    PatientProfileMissing,
    SessionNotFound,
    LinkExpired,
)

from .identifiers import conversation_id, video_room_id, room_id_for_session

from .join_window import JoinWindow, evaluate_join_window, NOT_STARTED, JOINABLE, ENDED

from .slot_checker import SlotConflictChecker
from .session_service import SessionLifecycleEngine, TRANSITIONS
from .notes_service import ClinicalNotesService
from .check_in_service import CheckInService
from .video_token_service import VideoTokenService
from .reminder_service import ReminderService
from .registry import ServiceRegistry, init_services, get_services

__all__ = [
    # Errors
    "MindflowError",
    "RequestValidationError",
    "SlotUnavailable",
    "InvalidTransition",
    "IdentifierUnavailable",
    "NotOwner",
    "RoleNotAllowed",
    "DoctorNotApproved",
    "DoctorNotFound",
    "DoctorProfileMissing",
    "PatientProfileMissing",
    "SessionNotFound",
    "LinkExpired",
    # Identifiers
    "conversation_id",
    "video_room_id",
    "room_id_for_session",
    # Join window
    "JoinWindow",
    "evaluate_join_window",
    "NOT_STARTED",
    "JOINABLE",
    "ENDED",
    # Services
    "SlotConflictChecker",
    "SessionLifecycleEngine",
    "TRANSITIONS",
    "ClinicalNotesService",
    "CheckInService",
    "VideoTokenService",
    "ReminderService",
    "ServiceRegistry",
    "init_services",
    "get_services",
]

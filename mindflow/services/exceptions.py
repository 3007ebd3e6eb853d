"""
Exception hierarchy for the session services.

Every error carries the HTTP status the API layer should answer with, so
routes can let them propagate to the app-level error handler.
"""
from typing import Any, Optional


class MindflowError(Exception):
    """Base exception for all session-service errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class RequestValidationError(MindflowError):
    """Raised when a request payload fails field-level validation."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[dict[str, Any]] = None) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class SlotUnavailable(MindflowError):
    """Raised when the doctor already has an active session at that instant."""

    status_code = 400

    def __init__(self, doctor_id: int, scheduled_date: Any) -> None:
        super().__init__(
            "This time slot is not available",
            {"doctor_id": doctor_id, "scheduled_date": str(scheduled_date)},
        )


class InvalidTransition(MindflowError):
    """Raised when a status change is not allowed from the current status."""

    status_code = 400

    def __init__(self, current: str, target: str, message: Optional[str] = None) -> None:
        message = message or f"Cannot move session from {current} to {target}"
        super().__init__(message, {"current_status": current, "target_status": target})
        self.current = current
        self.target = target


class IdentifierUnavailable(MindflowError):
    """Raised when a session has no stable identifier to derive a room id from."""

    status_code = 400

    def __init__(self) -> None:
        super().__init__("Session has no stable identifier; cannot derive a video room id")


class NotOwner(MindflowError):
    """Raised when a party acts on a session that is not theirs."""

    status_code = 403

    def __init__(self, session_id: Optional[str] = None) -> None:
        super().__init__("You do not have access to this session", {"session_id": session_id})


class RoleNotAllowed(MindflowError):
    """Raised when the caller's role may not use an operation."""

    status_code = 403

    def __init__(self, role: str, allowed: tuple) -> None:
        super().__init__(
            f"Permission denied. Required roles: {', '.join(allowed)}",
            {"role": role},
        )


class DoctorNotApproved(MindflowError):
    status_code = 403

    def __init__(self, doctor_id: Any) -> None:
        super().__init__("Doctor is not approved for bookings", {"doctor_id": doctor_id})


class LinkExpired(MindflowError):
    """Raised by the video token gate once link_expires_at has passed."""

    status_code = 403

    def __init__(self, room_name: str) -> None:
        super().__init__("This session link has expired. Please request a new link.", {"room": room_name})


class DoctorNotFound(MindflowError):
    status_code = 404

    def __init__(self, doctor_id: Any) -> None:
        super().__init__("Doctor not found", {"doctor_id": doctor_id})


class PatientProfileMissing(MindflowError):
    status_code = 404

    def __init__(self, user_id: Any) -> None:
        super().__init__("Patient profile not found", {"user_id": user_id})


class DoctorProfileMissing(MindflowError):
    status_code = 404

    def __init__(self, user_id: Any) -> None:
        super().__init__("Doctor profile not found", {"user_id": user_id})


class SessionNotFound(MindflowError):
    status_code = 404

    def __init__(self, session_ref: Any) -> None:
        super().__init__("Session not found", {"session_id": str(session_ref)})

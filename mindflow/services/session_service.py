"""
Session Lifecycle Service
Booking, cancellation, status progression and check-in linkage for sessions
"""
import logging
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from mindflow.models import (
    CancelledBy,
    CheckIn,
    Patient,
    Session,
    SessionMode,
    SessionStatus,
    SessionType,
    UserRole,
)
from mindflow.utils.timeutils import utcnow
from .exceptions import (
    DoctorNotApproved,
    DoctorNotFound,
    DoctorProfileMissing,
    InvalidTransition,
    NotOwner,
    PatientProfileMissing,
    RoleNotAllowed,
    SessionNotFound,
    SlotUnavailable,
)
from .identifiers import room_id_for_session, video_room_id
from .join_window import JoinWindow, evaluate_join_window
from .slot_checker import SlotConflictChecker

logger = logging.getLogger(__name__)

# Status progression driven by doctor actions and the background sweep.
# Cancellation has its own entry point (cancel()).
TRANSITIONS = {
    SessionStatus.SCHEDULED: frozenset({SessionStatus.CONFIRMED, SessionStatus.IN_PROGRESS, SessionStatus.NO_SHOW}),
    SessionStatus.CONFIRMED: frozenset({SessionStatus.IN_PROGRESS, SessionStatus.NO_SHOW}),
    SessionStatus.IN_PROGRESS: frozenset({SessionStatus.COMPLETED}),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.CANCELLED: frozenset(),
    SessionStatus.NO_SHOW: frozenset(),
}

CANCELLABLE = frozenset(SessionStatus.active())

# Session ids taken by a booking in the same millisecond are regenerated this many times
SESSION_ID_ATTEMPTS = 3


class SessionLifecycleEngine:
    """
    Owns the state machine of a Session.

    Every public mutator is all-or-nothing: the SQLAlchemy session is committed
    once at the end, or rolled back if anything raises.
    """

    def __init__(
        self,
        db_session,
        session_repository,
        directory_repository,
        link_ttl_minutes: int = 15,
        default_duration: int = 50,
        join_margin_minutes: int = 15,
    ):
        self.db_session = db_session
        self.sessions = session_repository
        self.directory = directory_repository
        self.slot_checker = SlotConflictChecker(session_repository)
        self.link_ttl = timedelta(minutes=link_ttl_minutes)
        self.default_duration = default_duration
        self.join_margin_minutes = join_margin_minutes

    @contextmanager
    def _transaction(self):
        try:
            yield
            self.db_session.commit()
        except Exception:
            self.db_session.rollback()
            raise

    # ------------------------------------------------------------------ create

    def generate_session_id(self, now: datetime, offset: int = 0) -> str:
        """``S-<epoch ms>-<n>``; uniqueness is backed by the column's unique index"""
        epoch_ms = int(now.replace(tzinfo=timezone.utc).timestamp() * 1000)
        return f"S-{epoch_ms}-{self.sessions.count() + 1 + offset}"

    def create(
        self,
        user_id,
        doctor_ref,
        scheduled_date: datetime,
        mode: SessionMode,
        duration: Optional[int] = None,
        session_type: SessionType = SessionType.FOLLOW_UP,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Session:
        """
        Book a session for the patient behind ``user_id``.

        Raises:
            PatientProfileMissing, DoctorNotFound, DoctorNotApproved, SlotUnavailable
        """
        now = now or utcnow()

        with self._transaction():
            patient = self.directory.find_patient_by_user(user_id)
            if patient is None:
                raise PatientProfileMissing(user_id)

            doctor = self.directory.find_doctor(doctor_ref)
            if doctor is None:
                raise DoctorNotFound(doctor_ref)
            if not doctor.is_approved:
                raise DoctorNotApproved(doctor_ref)

            self.slot_checker.ensure_available(doctor.id, scheduled_date)

            fields = {
                'patient_id': patient.id,
                'doctor_id': doctor.id,
                'scheduled_date': scheduled_date,
                'duration': duration or self.default_duration,
                'type': session_type,
                'mode': mode,
                'status': SessionStatus.SCHEDULED,
                'notes': notes,
            }
            session = self._insert(fields, now)
            self.assign_doctor_if_unset(patient, doctor.id)

        logger.info(
            "Booked session %s (patient=%s doctor=%s at %s, mode=%s)",
            session.session_id, patient.patient_id, doctor.doctor_id, scheduled_date.isoformat(), mode.value,
        )
        return session

    def _insert(self, fields: dict, now: datetime) -> Session:
        """
        Insert the session under a freshly generated session id.

        A unique-index violation is either a concurrent booking of the same
        slot (SlotUnavailable) or another booking that took the same session id
        in the same millisecond, in which case the id is regenerated.
        """
        doctor_id, scheduled_date = fields['doctor_id'], fields['scheduled_date']
        for attempt in range(SESSION_ID_ATTEMPTS):
            session_id = self.generate_session_id(now, offset=attempt)
            fields['session_id'] = session_id
            if fields['mode'] == SessionMode.VIDEO:
                room_id = video_room_id(session_id)
                fields['video_room_id'] = room_id
                fields['video_room_url'] = room_id
                fields['link_expires_at'] = now + self.link_ttl
            try:
                return self.sessions.create(**fields)
            except IntegrityError:
                self.db_session.rollback()
                if self.sessions.find_active_by_doctor_and_time(doctor_id, scheduled_date) is not None:
                    logger.warning("Concurrent booking rejected for doctor %s at %s", doctor_id, scheduled_date)
                    raise SlotUnavailable(doctor_id, scheduled_date)
                if attempt == SESSION_ID_ATTEMPTS - 1:
                    raise
                logger.warning("Session id %s already taken, regenerating", session_id)

    def assign_doctor_if_unset(self, patient: Patient, doctor_id: int) -> bool:
        """First booking wins: a patient without an assigned doctor gets this one"""
        assigned = self.directory.assign_doctor_if_unset(patient, doctor_id)
        if assigned:
            logger.info("Assigned doctor %s to patient %s", doctor_id, patient.patient_id)
        return assigned

    # ------------------------------------------------------------------ lookups

    def get_session(self, session_ref) -> Session:
        session = self.sessions.find_by_id(session_ref)
        if session is None:
            raise SessionNotFound(session_ref)
        return session

    def resolve_party(self, session: Session, user_id) -> CancelledBy:
        """Which side of the session the user is on; NotOwner if neither"""
        patient = self.directory.find_patient_by_user(user_id)
        if patient is not None and patient.id == session.patient_id:
            return CancelledBy.PATIENT
        doctor = self.directory.find_doctor_by_user(user_id)
        if doctor is not None and doctor.id == session.doctor_id:
            return CancelledBy.DOCTOR
        raise NotOwner(session.session_id)

    def get_for_participant(self, session_ref, user_id) -> Tuple[Session, CancelledBy]:
        session = self.get_session(session_ref)
        return session, self.resolve_party(session, user_id)

    def list_for_user(
        self,
        user_id,
        status: Optional[SessionStatus] = None,
        upcoming: bool = False,
        day: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> List[Session]:
        """
        Sessions visible to the caller: their own as patient, or their schedule as doctor.

        ``upcoming`` keeps scheduled/confirmed sessions from now on, soonest first.
        """
        now = now or utcnow()
        user = self.directory.find_user(user_id)
        role = user.role if user else None

        filters = {}
        if upcoming:
            filters['statuses'] = [SessionStatus.SCHEDULED, SessionStatus.CONFIRMED]
            filters['starts_after'] = now
            filters['ascending'] = True
        elif status is not None:
            filters['statuses'] = [status]
        if day is not None:
            filters['day'] = day
            filters['ascending'] = True

        if role == UserRole.PATIENT:
            patient = self.directory.find_patient_by_user(user_id)
            if patient is None:
                raise PatientProfileMissing(user_id)
            return self.sessions.list_for_patient(patient.id, **filters)
        if role == UserRole.DOCTOR:
            doctor = self.directory.find_doctor_by_user(user_id)
            if doctor is None:
                raise DoctorProfileMissing(user_id)
            return self.sessions.list_for_doctor(doctor.id, **filters)
        raise RoleNotAllowed(role.value if role else 'unknown', ('patient', 'doctor'))

    # ------------------------------------------------------------------ cancel

    def cancel(
        self,
        session_ref,
        user_id,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Session:
        """
        Cancel on behalf of the session's patient or doctor.

        Raises:
            SessionNotFound, NotOwner, InvalidTransition
        """
        now = now or utcnow()
        with self._transaction():
            session, party = self.get_for_participant(session_ref, user_id)
            self._apply_cancel(session, party, reason, now)
        logger.info("Session %s cancelled by %s", session.session_id, party.value)
        return session

    def cancel_by_system(self, session: Session, reason: Optional[str] = None, now: Optional[datetime] = None) -> Session:
        now = now or utcnow()
        with self._transaction():
            self._apply_cancel(session, CancelledBy.SYSTEM, reason, now)
        logger.info("Session %s cancelled by system", session.session_id)
        return session

    def _apply_cancel(self, session: Session, party: CancelledBy, reason: Optional[str], now: datetime) -> None:
        if session.status not in CANCELLABLE:
            raise InvalidTransition(
                session.status.value,
                SessionStatus.CANCELLED.value,
                message=f"Cannot cancel {session.status.value} appointment",
            )
        session.status = SessionStatus.CANCELLED
        session.cancelled_by = party
        session.cancelled_at = now
        session.cancellation_reason = reason
        self.sessions.save(session)

    # ------------------------------------------------------------------ status progression

    @staticmethod
    def can_transition(current: SessionStatus, target: SessionStatus) -> bool:
        return target in TRANSITIONS[current]

    def advance_status(
        self,
        session_ref,
        new_status: SessionStatus,
        user_id=None,
        now: Optional[datetime] = None,
    ) -> Session:
        """
        Move a session along its lifecycle. ``user_id`` None means a system actor;
        otherwise only the session's doctor may advance it.

        Raises:
            SessionNotFound, NotOwner, InvalidTransition
        """
        now = now or utcnow()
        with self._transaction():
            session = self.get_session(session_ref)
            if user_id is not None and self.resolve_party(session, user_id) != CancelledBy.DOCTOR:
                raise NotOwner(session.session_id)
            self._apply_status(session, new_status, now)
        logger.info("Session %s moved to %s", session.session_id, new_status.value)
        return session

    def _apply_status(self, session: Session, new_status: SessionStatus, now: datetime) -> None:
        if new_status == SessionStatus.CANCELLED:
            raise InvalidTransition(
                session.status.value,
                new_status.value,
                message="Sessions are cancelled through the appointment, not a status update",
            )
        if not self.can_transition(session.status, new_status):
            raise InvalidTransition(session.status.value, new_status.value)

        if new_status == SessionStatus.IN_PROGRESS:
            session.actual_start_time = now
        elif new_status == SessionStatus.COMPLETED:
            started = session.actual_start_time or session.scheduled_date
            session.actual_end_time = now
            session.actual_duration = max(0, int((now - started).total_seconds() // 60))
        session.status = new_status
        self.sessions.save(session)

    # ------------------------------------------------------------------ check-in linkage

    def link_check_in(self, session: Session, check_in: CheckIn) -> None:
        """
        Attach a check-in to a session. Runs inside the caller's transaction.

        A second check-in replaces the first (last write wins).
        """
        if session.check_in_id is not None and session.check_in_id != check_in.id:
            logger.warning(
                "Session %s already linked to check-in %s; relinking to %s",
                session.session_id, session.check_in_id, check_in.id,
            )
        session.check_in_id = check_in.id
        session.check_in_completed = True
        self.sessions.save(session)

    # ------------------------------------------------------------------ joining

    def join_details(self, session_ref, user_id, now: Optional[datetime] = None) -> dict:
        """Room id and join window as seen by either participant"""
        now = now or utcnow()
        session, party = self.get_for_participant(session_ref, user_id)
        window = self.join_window(session, now)
        room_id = room_id_for_session(session) if session.mode == SessionMode.VIDEO else None
        return {
            'session_id': session.session_id,
            'role': party.value,
            'mode': session.mode.value,
            'status': session.status.value,
            'video_room_id': room_id,
            'join_window': window.to_dict(),
            'can_join': window.can_join and session.status.is_active,
        }

    def join_window(self, session: Session, now: Optional[datetime] = None) -> JoinWindow:
        return evaluate_join_window(
            now or utcnow(), session.scheduled_date, session.duration, self.join_margin_minutes,
        )

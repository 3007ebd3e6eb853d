"""
Clinical notes on a session, readable and writable only by the session's doctor.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Optional

from mindflow.models import NOTE_FIELD_LIMITS, RiskLevel, Session
from mindflow.utils.timeutils import isoformat, utcnow
from .exceptions import NotOwner, RequestValidationError, SessionNotFound

logger = logging.getLogger(__name__)

NOTE_FIELDS = tuple(NOTE_FIELD_LIMITS) + ('risk_assessment',)


class ClinicalNotesService:

    def __init__(self, db_session, session_repository, directory_repository):
        self.db_session = db_session
        self.sessions = session_repository
        self.directory = directory_repository

    def _owned_session(self, session_ref, doctor_user_id) -> Session:
        session = self.sessions.find_by_id(session_ref)
        if session is None:
            raise SessionNotFound(session_ref)
        doctor = self.directory.find_doctor_by_user(doctor_user_id)
        if doctor is None or doctor.id != session.doctor_id:
            raise NotOwner(session.session_id)
        return session

    def get_notes(self, session_ref, doctor_user_id) -> Dict[str, Any]:
        session = self._owned_session(session_ref, doctor_user_id)
        return {
            'session_id': session.session_id,
            'notes': session.notes_dict(),
            'patient': session.patient.to_summary() if session.patient else None,
            'session_date': isoformat(session.scheduled_date),
            'status': session.status.value,
        }

    @staticmethod
    def _clean(fields: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = {}
        for name, value in fields.items():
            if name not in NOTE_FIELDS:
                raise RequestValidationError(f'Unknown note field "{name}"', field=name)
            if name == 'risk_assessment':
                try:
                    cleaned[name] = RiskLevel(value) if value is not None else RiskLevel.NONE
                except ValueError:
                    raise RequestValidationError(
                        f'Invalid risk_assessment. Valid values: {", ".join(r.value for r in RiskLevel)}',
                        field=name,
                    )
                continue
            limit = NOTE_FIELD_LIMITS[name]
            if value is not None and len(value) > limit:
                raise RequestValidationError(f'Field "{name}" exceeds {limit} characters', field=name)
            cleaned[name] = value
        return cleaned

    def update_notes(
        self,
        session_ref,
        doctor_user_id,
        fields: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> Session:
        """
        Overwrite only the supplied note fields and stamp notes_updated_at.
        Lifecycle status is untouched.
        """
        now = now or utcnow()
        try:
            session = self._owned_session(session_ref, doctor_user_id)
            cleaned = self._clean(fields)
            for name, value in cleaned.items():
                setattr(session, name, value)
            session.notes_updated_at = now
            self.sessions.save(session)
            self.db_session.commit()
        except Exception:
            self.db_session.rollback()
            raise

        logger.info("Notes updated on session %s (%s)", session.session_id, ', '.join(sorted(cleaned)) or 'no fields')
        return session

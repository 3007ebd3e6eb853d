"""
Check-In Service
Pre-session wellness snapshots and their linkage to sessions
"""
import logging
from typing import List, Optional

from mindflow.models import CheckIn
from .exceptions import NotOwner, PatientProfileMissing, SessionNotFound

logger = logging.getLogger(__name__)


class CheckInService:

    def __init__(self, db_session, check_in_repository, session_repository, directory_repository, engine):
        self.db_session = db_session
        self.check_ins = check_in_repository
        self.sessions = session_repository
        self.directory = directory_repository
        self.engine = engine

    def create_check_in(
        self,
        user_id,
        mood: int,
        primary_concern,
        severity: int,
        session_ref: Optional[str] = None,
        specific_concerns: Optional[List[str]] = None,
        note: Optional[str] = None,
        sleep_quality: Optional[int] = None,
        energy_level: Optional[int] = None,
        stress_level: Optional[int] = None,
    ) -> CheckIn:
        """
        Record a check-in and, if a session is referenced, link it in the same transaction.

        Raises:
            PatientProfileMissing, SessionNotFound, NotOwner
        """
        try:
            patient = self.directory.find_patient_by_user(user_id)
            if patient is None:
                raise PatientProfileMissing(user_id)

            session = None
            if session_ref:
                session = self.sessions.find_by_id(session_ref)
                if session is None:
                    raise SessionNotFound(session_ref)
                if session.patient_id != patient.id:
                    raise NotOwner(session.session_id)

            check_in = self.check_ins.create(
                patient_id=patient.id,
                session_id=session.id if session else None,
                mood=mood,
                primary_concern=primary_concern,
                severity=severity,
                specific_concerns=list(specific_concerns or []),
                note=note or '',
                sleep_quality=sleep_quality,
                energy_level=energy_level,
                stress_level=stress_level,
                reviewed_by_doctor=False,
            )
            if session is not None:
                self.engine.link_check_in(session, check_in)
            self.db_session.commit()
        except Exception:
            self.db_session.rollback()
            raise

        logger.info(
            "Check-in %s recorded for patient %s%s",
            check_in.id, patient.patient_id, f" (session {session.session_id})" if session else '',
        )
        return check_in

    def list_check_ins(self, user_id, session_ref: Optional[str] = None) -> List[CheckIn]:
        patient = self.directory.find_patient_by_user(user_id)
        if patient is None:
            raise PatientProfileMissing(user_id)
        session_pk = None
        if session_ref:
            session = self.sessions.find_by_id(session_ref)
            if session is None:
                raise SessionNotFound(session_ref)
            if session.patient_id != patient.id:
                raise NotOwner(session.session_id)
            session_pk = session.id
        return self.check_ins.list_for_patient(patient.id, session_pk)

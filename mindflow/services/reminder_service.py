"""
Reminder Service
Periodic sweeps over upcoming and overdue sessions, run by the Celery worker
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from mindflow.models import SessionStatus
from mindflow.utils.timeutils import utcnow
from .email_service import send_session_reminder_email
from .exceptions import InvalidTransition
from .join_window import ENDED

logger = logging.getLogger(__name__)


class ReminderService:

    def __init__(self, db_session, session_repository, engine, lead_minutes: int = 60):
        self.db_session = db_session
        self.sessions = session_repository
        self.engine = engine
        self.lead = timedelta(minutes=lead_minutes)

    def send_due_reminders(self, now: Optional[datetime] = None) -> dict:
        """
        Email both participants of sessions starting within the lead time and
        mark them reminded. Delivery failures do not block the stamp.
        """
        now = now or utcnow()
        reminded = []
        try:
            for session in self.sessions.find_reminder_candidates(now, self.lead):
                patient, doctor = session.patient, session.doctor
                send_session_reminder_email(patient.user.email, patient.first_name, doctor.full_name, session)
                send_session_reminder_email(doctor.user.email, doctor.full_name, patient.full_name, session)
                session.reminder_sent = True
                session.reminder_sent_at = now
                self.sessions.save(session)
                reminded.append(session.session_id)
            self.db_session.commit()
        except Exception:
            self.db_session.rollback()
            raise

        if reminded:
            logger.info("Sent reminders for %d session(s)", len(reminded))
        return {'reminded': reminded, 'timestamp': now.isoformat()}

    def mark_no_shows(self, now: Optional[datetime] = None) -> dict:
        """
        Scheduled/confirmed sessions whose join window has closed become no-shows.
        """
        now = now or utcnow()
        marked = []
        skipped = []
        for session in self.sessions.find_no_show_candidates(now):
            if self.engine.join_window(session, now).state != ENDED:
                continue
            try:
                self.engine.advance_status(session.session_id, SessionStatus.NO_SHOW, now=now)
                marked.append(session.session_id)
            except InvalidTransition as e:
                # Moved on concurrently (e.g. started by the doctor)
                logger.info("Skipping no-show for %s: %s", session.session_id, e.message)
                skipped.append(session.session_id)

        if marked:
            logger.info("Marked %d session(s) as no-show", len(marked))
        return {'marked': marked, 'skipped': skipped, 'timestamp': now.isoformat()}

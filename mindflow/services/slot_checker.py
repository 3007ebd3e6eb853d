"""
Slot conflict checking.

Only exact start-instant equality counts as a conflict; durations are not
compared. The partial unique index on sessions stays the authoritative guard.
"""
from datetime import datetime

from .exceptions import SlotUnavailable


class SlotConflictChecker:

    def __init__(self, session_repository):
        self.sessions = session_repository

    def is_available(self, doctor_id: int, scheduled_date: datetime) -> bool:
        return self.sessions.find_active_by_doctor_and_time(doctor_id, scheduled_date) is None

    def ensure_available(self, doctor_id: int, scheduled_date: datetime) -> None:
        if not self.is_available(doctor_id, scheduled_date):
            raise SlotUnavailable(doctor_id, scheduled_date)

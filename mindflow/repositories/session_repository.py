"""
Session Repository
Read/write access to Session rows through an injected SQLAlchemy session
"""
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Union

from sqlalchemy import func, select

from mindflow.models import Session, SessionStatus


class SessionRepository:
    """Query helpers for sessions. Never commits; the calling service owns the transaction."""

    def __init__(self, db_session):
        self.db_session = db_session

    def find_active_by_doctor_and_time(self, doctor_id: int, when: datetime) -> Optional[Session]:
        """Active session occupying the exact (doctor, instant) slot, if any"""
        stmt = select(Session).where(
            Session.doctor_id == doctor_id,
            Session.scheduled_date == when,
            Session.status.in_(SessionStatus.active()),
        )
        return self.db_session.execute(stmt).scalars().first()

    def create(self, **fields) -> Session:
        """Insert a session and flush so constraint violations surface here"""
        session = Session(**fields)
        self.db_session.add(session)
        self.db_session.flush()
        return session

    def find_by_id(self, session_ref: Union[str, int]) -> Optional[Session]:
        """
        Look up by human session id (``S-...``) or by integer primary key
        """
        ref = str(session_ref).strip()
        if not ref:
            return None
        if ref.isdigit():
            found = self.db_session.get(Session, int(ref))
            if found is not None:
                return found
        stmt = select(Session).where(Session.session_id == ref)
        return self.db_session.execute(stmt).scalars().first()

    def find_by_room_id(self, room_id: str) -> Optional[Session]:
        stmt = select(Session).where(Session.video_room_id == room_id)
        return self.db_session.execute(stmt).scalars().first()

    def save(self, session: Session) -> Session:
        self.db_session.add(session)
        self.db_session.flush()
        return session

    def count(self) -> int:
        return self.db_session.execute(select(func.count(Session.id))).scalar_one()

    def list_for_patient(self, patient_id: int, **filters) -> List[Session]:
        return self._list(Session.patient_id == patient_id, **filters)

    def list_for_doctor(self, doctor_id: int, **filters) -> List[Session]:
        return self._list(Session.doctor_id == doctor_id, **filters)

    def _list(
        self,
        owner_clause,
        statuses: Optional[Iterable[SessionStatus]] = None,
        starts_after: Optional[datetime] = None,
        day: Optional[datetime] = None,
        ascending: bool = False,
    ) -> List[Session]:
        stmt = select(Session).where(owner_clause)
        if statuses:
            stmt = stmt.where(Session.status.in_(list(statuses)))
        if starts_after is not None:
            stmt = stmt.where(Session.scheduled_date >= starts_after)
        if day is not None:
            start_of_day = datetime(day.year, day.month, day.day)
            stmt = stmt.where(
                Session.scheduled_date >= start_of_day,
                Session.scheduled_date < start_of_day + timedelta(days=1),
            )
        order = Session.scheduled_date.asc() if ascending else Session.scheduled_date.desc()
        return list(self.db_session.execute(stmt.order_by(order)).scalars())

    def find_reminder_candidates(self, now: datetime, lead: timedelta) -> List[Session]:
        """Upcoming scheduled/confirmed sessions inside the reminder lead time, not yet reminded"""
        stmt = select(Session).where(
            Session.status.in_([SessionStatus.SCHEDULED, SessionStatus.CONFIRMED]),
            Session.reminder_sent.is_(False),
            Session.scheduled_date >= now,
            Session.scheduled_date <= now + lead,
        ).order_by(Session.scheduled_date.asc())
        return list(self.db_session.execute(stmt).scalars())

    def find_no_show_candidates(self, started_before: datetime) -> List[Session]:
        """Scheduled/confirmed sessions that started before the given instant"""
        stmt = select(Session).where(
            Session.status.in_([SessionStatus.SCHEDULED, SessionStatus.CONFIRMED]),
            Session.scheduled_date < started_before,
        ).order_by(Session.scheduled_date.asc())
        return list(self.db_session.execute(stmt).scalars())

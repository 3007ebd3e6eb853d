from typing import List, Optional

from sqlalchemy import select

from mindflow.models import CheckIn


class CheckInRepository:

    def __init__(self, db_session):
        self.db_session = db_session

    def create(self, **fields) -> CheckIn:
        check_in = CheckIn(**fields)
        self.db_session.add(check_in)
        self.db_session.flush()
        return check_in

    def list_for_patient(self, patient_id: int, session_pk: Optional[int] = None) -> List[CheckIn]:
        stmt = select(CheckIn).where(CheckIn.patient_id == patient_id)
        if session_pk is not None:
            stmt = stmt.where(CheckIn.session_id == session_pk)
        return list(self.db_session.execute(stmt.order_by(CheckIn.created_at.desc(), CheckIn.id.desc())).scalars())

"""
Doctor/Patient directory lookups used by the session services
"""
from typing import Optional

from sqlalchemy import select

from mindflow.models import Doctor, Patient, User


class DirectoryRepository:

    def __init__(self, db_session):
        self.db_session = db_session

    def find_user(self, user_id) -> Optional[User]:
        return self.db_session.get(User, int(user_id))

    def find_doctor(self, doctor_ref) -> Optional[Doctor]:
        """By integer key or by human doctor id (``D-1234``)"""
        ref = str(doctor_ref).strip()
        if ref.isdigit():
            return self.db_session.get(Doctor, int(ref))
        stmt = select(Doctor).where(Doctor.doctor_id == ref)
        return self.db_session.execute(stmt).scalars().first()

    def find_patient_by_user(self, user_id) -> Optional[Patient]:
        stmt = select(Patient).where(Patient.user_id == int(user_id))
        return self.db_session.execute(stmt).scalars().first()

    def find_doctor_by_user(self, user_id) -> Optional[Doctor]:
        stmt = select(Doctor).where(Doctor.user_id == int(user_id))
        return self.db_session.execute(stmt).scalars().first()

    def assign_doctor_if_unset(self, patient: Patient, doctor_id: int) -> bool:
        """First booking wins: set the patient's assigned doctor only when empty"""
        if patient.assigned_doctor_id is not None:
            return False
        patient.assigned_doctor_id = doctor_id
        self.db_session.add(patient)
        return True

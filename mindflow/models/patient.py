from mindflow.extensions import db
from .base import TimestampMixin


class Patient(db.Model, TimestampMixin):
    __tablename__ = 'patients'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False, index=True)
    patient_id = db.Column(db.String(20), unique=True, nullable=False, index=True)  # e.g., P-4821

    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    phone_number = db.Column(db.String(20))

    # Set by the first booking if still empty
    assigned_doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id'), nullable=True, index=True)

    # Relationships
    user = db.relationship('User', backref=db.backref('patient', uselist=False), lazy=True)
    assigned_doctor = db.relationship('Doctor', foreign_keys=[assigned_doctor_id], lazy=True)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def to_summary(self):
        return {
            'id': self.id,
            'patient_id': self.patient_id,
            'first_name': self.first_name,
            'last_name': self.last_name,
        }

    def __repr__(self):
        return f"<Patient {self.full_name} ({self.patient_id})>"

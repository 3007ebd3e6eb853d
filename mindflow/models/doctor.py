from mindflow.extensions import db
from .base import TimestampMixin


class Doctor(db.Model, TimestampMixin):
    __tablename__ = 'doctors'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False, index=True)
    doctor_id = db.Column(db.String(20), unique=True, nullable=False, index=True)  # e.g., D-1934

    title = db.Column(db.String(10), default='Dr.')
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    specialty = db.Column(db.String(120), nullable=False)

    # Approval is granted outside this service (admin tooling)
    is_approved = db.Column(db.Boolean, default=False, nullable=False)
    approved_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship('User', backref=db.backref('doctor', uselist=False), lazy=True)

    @property
    def full_name(self):
        return f"{self.title} {self.first_name} {self.last_name}"

    def to_summary(self):
        return {
            'id': self.id,
            'doctor_id': self.doctor_id,
            'title': self.title,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'specialty': self.specialty,
        }

    def __repr__(self):
        return f"<Doctor {self.full_name} ({self.doctor_id})>"

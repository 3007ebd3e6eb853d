from mindflow.extensions import db
from mindflow.utils.timeutils import isoformat, utcnow
from .enums import PrimaryConcern, enum_values


class CheckIn(db.Model):
    """Patient-submitted pre-session wellness snapshot"""
    __tablename__ = 'check_ins'

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id'), nullable=False, index=True)
    session_id = db.Column(db.Integer, db.ForeignKey('sessions.id'), nullable=True, index=True)

    mood = db.Column(db.Integer, nullable=False)  # 1-10
    primary_concern = db.Column(
        db.Enum(PrimaryConcern, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )
    severity = db.Column(db.Integer, nullable=False)  # 1-5
    specific_concerns = db.Column(db.JSON, nullable=False, default=list)
    note = db.Column(db.String(1000), nullable=True)
    sleep_quality = db.Column(db.Integer, nullable=True)  # 1-10
    energy_level = db.Column(db.Integer, nullable=True)  # 1-10
    stress_level = db.Column(db.Integer, nullable=True)  # 1-10

    reviewed_by_doctor = db.Column(db.Boolean, default=False, nullable=False)
    reviewed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    patient = db.relationship('Patient', backref=db.backref('check_ins', lazy='dynamic'), lazy=True)
    session = db.relationship('Session', foreign_keys=[session_id], lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'patient_id': self.patient_id,
            'session_id': self.session.session_id if self.session else None,
            'mood': self.mood,
            'primary_concern': self.primary_concern.value,
            'severity': self.severity,
            'specific_concerns': list(self.specific_concerns or []),
            'note': self.note or '',
            'sleep_quality': self.sleep_quality,
            'energy_level': self.energy_level,
            'stress_level': self.stress_level,
            'reviewed_by_doctor': self.reviewed_by_doctor,
            'reviewed_at': isoformat(self.reviewed_at),
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<CheckIn {self.id} - patient {self.patient_id}>"

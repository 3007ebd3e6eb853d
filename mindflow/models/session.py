"""
Session model - one scheduled therapy appointment between one patient and one doctor.

Sessions are never deleted; cancellation is a status.
"""
from mindflow.extensions import db
from mindflow.utils.timeutils import isoformat
from .base import TimestampMixin
from .enums import (
    CancelledBy,
    RiskLevel,
    SessionMode,
    SessionStatus,
    SessionType,
    enum_values,
)

ACTIVE_STATUS_SQL = "status IN ('scheduled', 'confirmed', 'in-progress')"

# Persisted limits for the doctor-authored note fields
NOTE_FIELD_LIMITS = {
    'session_notes': 10000,
    'presenting_concerns': 2000,
    'key_observations': 2000,
    'interventions_used': 2000,
    'treatment_plan': 2000,
    'homework': 1000,
    'risk_notes': 1000,
}


def _enum(enum_cls, length=20):
    return db.Enum(enum_cls, values_callable=enum_values, native_enum=False, length=length)


class Session(db.Model, TimestampMixin):
    __tablename__ = 'sessions'
    __table_args__ = (
        # Authoritative double-booking guard: one active session per doctor and start instant
        db.Index(
            'uq_sessions_doctor_slot_active',
            'doctor_id',
            'scheduled_date',
            unique=True,
            sqlite_where=db.text(ACTIVE_STATUS_SQL),
            postgresql_where=db.text(ACTIVE_STATUS_SQL),
        ),
        db.Index('ix_sessions_patient_scheduled', 'patient_id', 'scheduled_date'),
        db.Index('ix_sessions_status_scheduled', 'status', 'scheduled_date'),
    )

    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.String(64), unique=True, nullable=False, index=True)  # e.g., S-1748786400000-12

    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id'), nullable=False, index=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id'), nullable=False, index=True)

    scheduled_date = db.Column(db.DateTime, nullable=False, index=True)  # naive UTC
    duration = db.Column(db.Integer, nullable=False, default=50)  # minutes
    type = db.Column(_enum(SessionType), nullable=False, default=SessionType.FOLLOW_UP)
    mode = db.Column(_enum(SessionMode), nullable=False, default=SessionMode.VIDEO)
    status = db.Column(_enum(SessionStatus), nullable=False, default=SessionStatus.SCHEDULED)
    notes = db.Column(db.String(2000), nullable=True)  # patient's booking note

    # Video linkage (mode == video only)
    video_room_id = db.Column(db.String(128), nullable=True, index=True)
    video_room_url = db.Column(db.String(128), nullable=True)  # legacy alias of video_room_id
    link_expires_at = db.Column(db.DateTime, nullable=True)  # token gate only, not the join window

    # Runtime
    actual_start_time = db.Column(db.DateTime, nullable=True)
    actual_end_time = db.Column(db.DateTime, nullable=True)
    actual_duration = db.Column(db.Integer, nullable=True)

    # Check-in linkage; check_ins.session_id carries the real foreign key
    check_in_id = db.Column(db.Integer, nullable=True, index=True)
    check_in_completed = db.Column(db.Boolean, default=False, nullable=False)

    # Cancellation
    cancelled_by = db.Column(_enum(CancelledBy), nullable=True)
    cancellation_reason = db.Column(db.String(500), nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    # Reminders
    reminder_sent = db.Column(db.Boolean, default=False, nullable=False)
    reminder_sent_at = db.Column(db.DateTime, nullable=True)

    # Clinical notes
    session_notes = db.Column(db.Text, nullable=True)
    presenting_concerns = db.Column(db.String(2000), nullable=True)
    key_observations = db.Column(db.String(2000), nullable=True)
    interventions_used = db.Column(db.String(2000), nullable=True)
    treatment_plan = db.Column(db.String(2000), nullable=True)
    homework = db.Column(db.String(1000), nullable=True)
    risk_assessment = db.Column(_enum(RiskLevel), nullable=False, default=RiskLevel.NONE)
    risk_notes = db.Column(db.String(1000), nullable=True)
    notes_updated_at = db.Column(db.DateTime, nullable=True)

    # Relationships
    patient = db.relationship('Patient', backref=db.backref('sessions', lazy='dynamic'), lazy=True)
    doctor = db.relationship('Doctor', backref=db.backref('sessions', lazy='dynamic'), lazy=True)
    check_in = db.relationship(
        'CheckIn',
        primaryjoin='foreign(Session.check_in_id) == CheckIn.id',
        uselist=False,
        viewonly=True,
        lazy=True,
    )

    def notes_dict(self):
        """Clinical notes with blank defaults"""
        return {
            'session_notes': self.session_notes or '',
            'presenting_concerns': self.presenting_concerns or '',
            'key_observations': self.key_observations or '',
            'interventions_used': self.interventions_used or '',
            'treatment_plan': self.treatment_plan or '',
            'homework': self.homework or '',
            'risk_assessment': (self.risk_assessment or RiskLevel.NONE).value,
            'risk_notes': self.risk_notes or '',
            'notes_updated_at': isoformat(self.notes_updated_at),
        }

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            'id': self.id,
            'session_id': self.session_id,
            'patient_id': self.patient_id,
            'doctor_id': self.doctor_id,
            'patient': self.patient.to_summary() if self.patient else None,
            'doctor': self.doctor.to_summary() if self.doctor else None,
            'scheduled_date': isoformat(self.scheduled_date),
            'duration': self.duration,
            'type': self.type.value,
            'mode': self.mode.value,
            'status': self.status.value,
            'notes': self.notes,
            'video_room_id': self.video_room_id,
            'video_room_url': self.video_room_url,
            'link_expires_at': isoformat(self.link_expires_at),
            'actual_start_time': isoformat(self.actual_start_time),
            'actual_end_time': isoformat(self.actual_end_time),
            'actual_duration': self.actual_duration,
            'check_in_id': self.check_in_id,
            'check_in_completed': self.check_in_completed,
            'cancelled_by': self.cancelled_by.value if self.cancelled_by else None,
            'cancellation_reason': self.cancellation_reason,
            'cancelled_at': isoformat(self.cancelled_at),
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<Session {self.session_id} - {self.status.value} at {self.scheduled_date}>"

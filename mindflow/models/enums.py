"""
Closed value sets for roles, session state and check-in fields.
Stored as their string values via db.Enum(values_callable=enum_values).
"""
import enum


def enum_values(enum_cls):
    return [member.value for member in enum_cls]


class UserRole(str, enum.Enum):
    PATIENT = 'patient'
    DOCTOR = 'doctor'
    ADMIN = 'admin'


class SessionStatus(str, enum.Enum):
    SCHEDULED = 'scheduled'
    CONFIRMED = 'confirmed'
    IN_PROGRESS = 'in-progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    NO_SHOW = 'no-show'

    @classmethod
    def active(cls):
        """Statuses that occupy a doctor's slot"""
        return (cls.SCHEDULED, cls.CONFIRMED, cls.IN_PROGRESS)

    @property
    def is_active(self):
        return self in SessionStatus.active()


class SessionType(str, enum.Enum):
    INITIAL = 'initial'
    FOLLOW_UP = 'follow-up'
    EMERGENCY = 'emergency'
    GROUP = 'group'


class SessionMode(str, enum.Enum):
    VIDEO = 'video'
    IN_PERSON = 'in-person'
    PHONE = 'phone'


class CancelledBy(str, enum.Enum):
    PATIENT = 'patient'
    DOCTOR = 'doctor'
    SYSTEM = 'system'


class RiskLevel(str, enum.Enum):
    NONE = 'none'
    LOW = 'low'
    MODERATE = 'moderate'
    HIGH = 'high'


class PrimaryConcern(str, enum.Enum):
    ANXIETY = 'Anxiety'
    DEPRESSION = 'Depression'
    STRESS = 'Stress'
    WORK_SCHOOL = 'Work/School'
    RELATIONSHIPS = 'Relationships'
    SLEEP = 'Sleep'
    OTHER = 'Other'

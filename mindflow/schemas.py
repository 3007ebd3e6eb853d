"""
Request payload schemas. Routes validate JSON bodies and query strings here,
so services only ever receive typed values.
"""
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from mindflow.models import PrimaryConcern, RiskLevel, SessionMode, SessionStatus, SessionType
from mindflow.services.exceptions import RequestValidationError
from mindflow.utils.timeutils import to_naive_utc


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=120)
    password: str = Field(..., min_length=1)


class BookingRequest(BaseModel):
    doctor_id: Union[int, str]
    scheduled_date: datetime
    mode: SessionMode
    duration: Optional[int] = Field(None, ge=1, le=480)
    type: SessionType = SessionType.FOLLOW_UP
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator('scheduled_date')
    @classmethod
    def normalise_to_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class CancelRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    reason: Optional[str] = Field(None, max_length=500)


class StatusUpdateRequest(BaseModel):
    status: SessionStatus


class SessionListQuery(BaseModel):
    status: Optional[SessionStatus] = None
    upcoming: bool = False
    date: Optional[datetime] = None

    @field_validator('date', mode='before')
    @classmethod
    def parse_day(cls, value):
        if value in (None, ''):
            return None
        if isinstance(value, str) and len(value) == 10:
            return datetime.strptime(value, '%Y-%m-%d')
        return value


class NotesUpdateRequest(BaseModel):
    session_notes: Optional[str] = Field(None, max_length=10000)
    presenting_concerns: Optional[str] = Field(None, max_length=2000)
    key_observations: Optional[str] = Field(None, max_length=2000)
    interventions_used: Optional[str] = Field(None, max_length=2000)
    treatment_plan: Optional[str] = Field(None, max_length=2000)
    homework: Optional[str] = Field(None, max_length=1000)
    risk_assessment: Optional[RiskLevel] = None
    risk_notes: Optional[str] = Field(None, max_length=1000)

    def supplied_fields(self) -> dict:
        """Only the fields present in the request body"""
        return self.model_dump(exclude_unset=True)


class CheckInCreateRequest(BaseModel):
    session_id: Optional[str] = None
    mood: int = Field(..., ge=1, le=10)
    primary_concern: PrimaryConcern
    severity: int = Field(..., ge=1, le=5)
    specific_concerns: List[str] = Field(default_factory=list)
    note: Optional[str] = Field(None, max_length=1000)
    sleep_quality: Optional[int] = Field(None, ge=1, le=10)
    energy_level: Optional[int] = Field(None, ge=1, le=10)
    stress_level: Optional[int] = Field(None, ge=1, le=10)


class VideoTokenRequest(BaseModel):
    channel: Optional[str] = None
    uid: int = 0


def _describe(error: ValidationError) -> RequestValidationError:
    first = error.errors()[0]
    field = '.'.join(str(part) for part in first.get('loc', ())) or None
    message = f'Field "{field}": {first.get("msg")}' if field else first.get('msg', 'Invalid request')
    return RequestValidationError(message, field=field, details={'errors': len(error.errors())})


def parse_payload(model, data):
    """
    Validate a dict against a schema.

    Raises:
        RequestValidationError: with a readable message naming the first bad field
    """
    if data is None:
        raise RequestValidationError('Request body must be JSON')
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise _describe(e) from None

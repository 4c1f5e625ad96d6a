from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime, timezone
from typing import Optional

from ..core.security import UserRole, Specialization
from ..models.appointment import AppointmentState

def _to_naive_utc(value: datetime) -> datetime:
    # Stored datetimes are naive UTC
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

class AppointmentCreate(BaseModel):
    doctor_id: int
    appointment_date_time: datetime
    symptoms: Optional[str] = None

    @field_validator("appointment_date_time")
    @classmethod
    def normalize_time(cls, value: datetime) -> datetime:
        return _to_naive_utc(value)

class DoctorAppointmentUpdate(BaseModel):
    fees: Optional[float] = Field(None, ge=0)
    prescription: Optional[str] = None
    is_diagnosis_done: Optional[bool] = None

class PatientAppointmentUpdate(BaseModel):
    symptoms: str

class UserSummary(BaseModel):
    """Display data joined onto appointment listings."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    mobile_number: str
    role: UserRole
    specialization: Optional[Specialization] = None

class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    doctor_id: int
    appointment_date_time: datetime
    symptoms: Optional[str] = None
    fees: Optional[float] = None
    prescription: Optional[str] = None
    is_diagnosis_done: bool
    state: AppointmentState
    created_at: datetime
    updated_at: Optional[datetime] = None

class AppointmentDetailResponse(AppointmentResponse):
    # None when the referenced user has been deleted
    patient: Optional[UserSummary] = None
    doctor: Optional[UserSummary] = None

class DeletionRequest(BaseModel):
    """Pending request by a patient to have an appointment removed."""
    appointment_id: int
    user_id: int
    requested_at: datetime

class MessageResponse(BaseModel):
    message: str

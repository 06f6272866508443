# app/schemas/appointments/appointment.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime
import re

from ...db.models.health.appointment import AppointmentStatus


# Full date-time: date, "T", time, optional fraction and optional Z or offset
ISO_DATETIME_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d{1,6})?)?(Z|[+-]\d{2}:\d{2})?$"
)


def parse_iso_datetime(v):
    if not isinstance(v, str) or not ISO_DATETIME_PATTERN.match(v):
        raise ValueError("dateTime must be an ISO-8601 date-time string")
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    return datetime.fromisoformat(v)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class AppointmentUpdate(CamelModel):
    """Partial update payload; every field may be omitted and unknown keys are ignored."""

    doctor_id: Optional[str] = Field(None, min_length=1)
    ambulance_id: Optional[str] = Field(None, min_length=1)
    date_time: Optional[datetime] = None
    condition: Optional[str] = None
    specialization: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    comments: Optional[str] = None
    description: Optional[str] = None
    prescriptions: Optional[List[str]] = None
    tests: Optional[List[str]] = None
    related_appointment_id: Optional[str] = Field(None, min_length=1)

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, v):
        # Omitting a field leaves it untouched; an explicit null is not a value
        if v is None:
            raise ValueError("Field may be omitted but not null")
        return v

    @field_validator("date_time", mode="before")
    @classmethod
    def require_iso_string(cls, v):
        return parse_iso_datetime(v)


class AppointmentCreate(CamelModel):
    patient_id: str = Field(min_length=1)
    doctor_id: Optional[str] = None
    ambulance_id: Optional[str] = None
    date_time: datetime
    condition: Optional[str] = None
    specialization: Optional[str] = None
    status: AppointmentStatus = AppointmentStatus.NEW
    comments: Optional[str] = None
    description: Optional[str] = None
    prescriptions: List[str] = []
    tests: List[str] = []

    @field_validator("date_time", mode="before")
    @classmethod
    def require_iso_string(cls, v):
        return parse_iso_datetime(v)


class PatientSummary(CamelModel):
    id: str
    name: str
    user_id: Optional[str] = None


class DoctorSummary(CamelModel):
    id: str
    name: str
    specialization: str
    is_available: bool


class AmbulanceSummary(CamelModel):
    id: str
    vehicle_number: str
    driver_name: Optional[str] = None
    is_available: bool


class RelatedAppointment(CamelModel):
    id: str
    patient_id: str
    date_time: datetime
    status: AppointmentStatus
    condition: Optional[str] = None


class AppointmentResponse(CamelModel):
    id: str
    patient_id: str
    doctor_id: Optional[str] = None
    ambulance_id: Optional[str] = None
    date_time: datetime
    condition: Optional[str] = None
    specialization: Optional[str] = None
    status: AppointmentStatus
    comments: Optional[str] = None
    description: Optional[str] = None
    prescriptions: List[str]
    tests: List[str]
    created_at: datetime
    updated_at: datetime
    patient: Optional[PatientSummary] = None
    doctor: Optional[DoctorSummary] = None
    ambulance: Optional[AmbulanceSummary] = None


class AppointmentDetailResponse(AppointmentResponse):
    related_appointments: List[RelatedAppointment] = []
    related_to: List[RelatedAppointment] = []

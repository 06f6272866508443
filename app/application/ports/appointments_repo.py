from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Protocol, Union
from datetime import datetime


class _Unset:
    """Marks a patch field the caller did not supply."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


@dataclass
class PatientDto:
    id: str
    name: str
    user_id: Optional[str] = None


@dataclass
class DoctorDto:
    id: str
    name: str
    specialization: str
    is_available: bool


@dataclass
class AmbulanceDto:
    id: str
    vehicle_number: str
    driver_name: Optional[str]
    is_available: bool


@dataclass
class RelatedAppointmentDto:
    id: str
    patient_id: str
    date_time: datetime
    status: str
    condition: Optional[str] = None


@dataclass
class AppointmentDto:
    id: str
    patient_id: str
    doctor_id: Optional[str]
    ambulance_id: Optional[str]
    date_time: datetime
    condition: Optional[str]
    specialization: Optional[str]
    status: str
    comments: Optional[str]
    description: Optional[str]
    prescriptions: List[str]
    tests: List[str]
    created_at: datetime
    updated_at: datetime
    patient: Optional[PatientDto] = None
    doctor: Optional[DoctorDto] = None
    ambulance: Optional[AmbulanceDto] = None
    related_appointments: List[RelatedAppointmentDto] = field(default_factory=list)
    related_to: List[RelatedAppointmentDto] = field(default_factory=list)


@dataclass
class AppointmentPatch:
    """Sparse update: a field left at UNSET is not written, anything else is."""

    doctor_id: Union[str, _Unset] = UNSET
    ambulance_id: Union[str, _Unset] = UNSET
    related_appointment_id: Union[str, _Unset] = UNSET
    date_time: Union[datetime, _Unset] = UNSET
    condition: Union[str, _Unset] = UNSET
    specialization: Union[str, _Unset] = UNSET
    status: Union[str, _Unset] = UNSET
    comments: Union[str, _Unset] = UNSET
    description: Union[str, _Unset] = UNSET
    prescriptions: Union[List[str], _Unset] = UNSET
    tests: Union[List[str], _Unset] = UNSET

    def present(self) -> Dict[str, Any]:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not UNSET:
                out[f.name] = value
        return out

    def is_empty(self) -> bool:
        return not self.present()


class AppointmentsRepository(Protocol):
    def get_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        ...

    def create(self, patient_id: str, date_time: datetime, values: Dict[str, Any]) -> AppointmentDto:
        ...

    def apply_patch(self, appointment_id: str, patch: AppointmentPatch) -> AppointmentDto:
        ...

    def delete_with_relations(self, appointment_id: str) -> List[str]:
        ...


class RelatedEntityNotFound(LookupError):
    """A patch or booking referenced an entity id that does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from .....db.models import Ambulance, Appointment, AppointmentLink, AppointmentStatus, Doctor, Patient
from .....application.ports.appointments_repo import (
    AmbulanceDto,
    AppointmentDto,
    AppointmentPatch,
    AppointmentsRepository,
    DoctorDto,
    PatientDto,
    RelatedAppointmentDto,
    RelatedEntityNotFound,
)


def _to_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _related_to_dto(self, a: Appointment) -> RelatedAppointmentDto:
        return RelatedAppointmentDto(
            id=a.id,
            patient_id=a.patient_id,
            date_time=a.date_time,
            status=AppointmentStatus(a.status).value,
            condition=a.condition,
        )

    def _appt_to_dto(self, a: Appointment, include_related: bool = False) -> AppointmentDto:
        dto = AppointmentDto(
            id=a.id,
            patient_id=a.patient_id,
            doctor_id=a.doctor_id,
            ambulance_id=a.ambulance_id,
            date_time=a.date_time,
            condition=a.condition,
            specialization=a.specialization,
            status=AppointmentStatus(a.status).value,
            comments=a.comments,
            description=a.description,
            prescriptions=list(a.prescriptions or []),
            tests=list(a.tests or []),
            created_at=a.created_at,
            updated_at=a.updated_at,
        )
        if a.patient:
            dto.patient = PatientDto(id=a.patient.id, name=a.patient.name, user_id=a.patient.user_id)
        if a.doctor:
            dto.doctor = DoctorDto(
                id=a.doctor.id,
                name=a.doctor.name,
                specialization=a.doctor.specialization,
                is_available=bool(a.doctor.is_available),
            )
        if a.ambulance:
            dto.ambulance = AmbulanceDto(
                id=a.ambulance.id,
                vehicle_number=a.ambulance.vehicle_number,
                driver_name=a.ambulance.driver_name,
                is_available=bool(a.ambulance.is_available),
            )
        if include_related:
            dto.related_appointments = [self._related_to_dto(r) for r in a.related_appointments]
            dto.related_to = [self._related_to_dto(r) for r in a.related_to]
        return dto

    def _load(self, appointment_id: str, include_related: bool = False) -> Optional[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.id == appointment_id)
            .options(
                selectinload(Appointment.patient),
                selectinload(Appointment.doctor),
                selectinload(Appointment.ambulance),
            )
        )
        if include_related:
            stmt = stmt.options(
                selectinload(Appointment.related_appointments),
                selectinload(Appointment.related_to),
            )
        return self.session.exec(stmt).first()

    def _require(self, model, entity: str, entity_id: str):
        row = self.session.get(model, entity_id)
        if row is None:
            raise RelatedEntityNotFound(entity, entity_id)
        return row

    def get_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        a = self._load(appointment_id, include_related=True)
        return self._appt_to_dto(a, include_related=True) if a else None

    def create(self, patient_id: str, date_time: datetime, values: Dict[str, Any]) -> AppointmentDto:
        self._require(Patient, "Patient", patient_id)
        if values.get("doctor_id"):
            self._require(Doctor, "Doctor", values["doctor_id"])
        if values.get("ambulance_id"):
            self._require(Ambulance, "Ambulance", values["ambulance_id"])

        appt = Appointment(patient_id=patient_id, date_time=_to_utc_naive(date_time), **values)
        try:
            self.session.add(appt)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return self._appt_to_dto(self._load(appt.id))

    def apply_patch(self, appointment_id: str, patch: AppointmentPatch) -> Optional[AppointmentDto]:
        appt = self.session.get(Appointment, appointment_id)
        if not appt:
            return None

        try:
            for name, value in patch.present().items():
                if name == "doctor_id":
                    appt.doctor_id = self._require(Doctor, "Doctor", value).id
                elif name == "ambulance_id":
                    appt.ambulance_id = self._require(Ambulance, "Ambulance", value).id
                elif name == "related_appointment_id":
                    target = self._require(Appointment, "Related appointment", value)
                    if target not in appt.related_to:
                        appt.related_to.append(target)
                elif name == "date_time":
                    appt.date_time = _to_utc_naive(value)
                elif name == "status":
                    appt.status = AppointmentStatus(value)
                elif name in ("prescriptions", "tests"):
                    setattr(appt, name, list(value))
                else:
                    setattr(appt, name, value)
            appt.updated_at = datetime.utcnow()
            self.session.add(appt)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        return self._appt_to_dto(self._load(appointment_id))

    def delete_with_relations(self, appointment_id: str) -> Optional[List[str]]:
        """Unlink the appointment from every referencer's related_to, then delete it.

        Returns the ids of the referencers that were unlinked, or None when the
        appointment does not exist. Nothing is committed unless every step succeeds.
        """
        appt = self.session.get(Appointment, appointment_id)
        if not appt:
            return None

        try:
            referencers = self.session.exec(
                select(Appointment)
                .join(AppointmentLink, AppointmentLink.appointment_id == Appointment.id)
                .where(AppointmentLink.related_to_id == appointment_id)
            ).all()

            cleaned = []
            for ref in referencers:
                ref.related_to.remove(appt)
                self.session.add(ref)
                self.session.flush()
                cleaned.append(ref.id)

            appt.related_to.clear()
            self.session.delete(appt)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        return cleaned

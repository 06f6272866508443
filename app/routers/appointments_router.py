import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from ..database import get_session
from ..exceptions import InternalError
from ..schemas.appointments.appointment import (
    AppointmentCreate,
    AppointmentDetailResponse,
    AppointmentResponse,
    AppointmentUpdate,
)
from ..schemas.common.common import MessageResponse
from ..application.services.appointments_service import AppointmentsService, patch_from_payload
from ..infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from ..infrastructure.audit.std_logger import StdAuditLogger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


def get_appointments_service(session: Session = Depends(get_session)) -> AppointmentsService:
    return AppointmentsService(repo=SqlAppointmentsRepository(session), audit=StdAuditLogger())


@router.post("", response_model=AppointmentResponse, status_code=201)
def book_appointment(
    appointment_data: AppointmentCreate,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    try:
        values = appointment_data.model_dump(exclude={"patient_id", "date_time"}, exclude_none=True)
        appt = appt_service.book(appointment_data.patient_id, appointment_data.date_time, values)
        return AppointmentResponse.model_validate(appt)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error booking appointment: {str(e)}")
        raise InternalError(str(e))


@router.get("/{appointment_id}", response_model=AppointmentDetailResponse)
def get_appointment(
    appointment_id: str,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    try:
        appt = appt_service.get(appointment_id)
        return AppointmentDetailResponse.model_validate(appt)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error retrieving appointment {appointment_id}: {str(e)}")
        raise InternalError(str(e))


@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: str,
    appointment_data: AppointmentUpdate,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    try:
        patch = patch_from_payload(appointment_data.model_dump(exclude_unset=True))
        appt = appt_service.update(appointment_id, patch)
        return AppointmentResponse.model_validate(appt)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating appointment {appointment_id}: {str(e)}")
        raise InternalError(str(e))


@router.delete("/{appointment_id}", response_model=MessageResponse)
def delete_appointment(
    appointment_id: str,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    try:
        appt_service.delete(appointment_id)
        return {"message": "Appointment deleted successfully"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting appointment {appointment_id}: {str(e)}")
        raise InternalError(str(e))

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ...exceptions import InternalError, NotFoundError
from ..ports.appointments_repo import (
    AppointmentDto,
    AppointmentPatch,
    AppointmentsRepository,
    RelatedEntityNotFound,
)
from ..ports.audit_logger import AuditLogger

logger = logging.getLogger(__name__)


def patch_from_payload(payload: Dict[str, Any]) -> AppointmentPatch:
    """Build a patch from the keys the client actually sent."""
    return AppointmentPatch(**payload)


@dataclass
class AppointmentsService:
    repo: AppointmentsRepository
    audit: Optional[AuditLogger] = None

    def get(self, appointment_id: str) -> AppointmentDto:
        appt = self.repo.get_by_id(appointment_id)
        if not appt:
            raise NotFoundError("Appointment not found")
        return appt

    def book(self, patient_id: str, date_time: datetime, values: Dict[str, Any]) -> AppointmentDto:
        try:
            appt = self.repo.create(patient_id, date_time, values)
        except RelatedEntityNotFound as e:
            raise NotFoundError(f"{e.entity} not found")
        self._audit("appointment.create", appt.id, details={"patient_id": patient_id})
        return appt

    def update(self, appointment_id: str, patch: AppointmentPatch) -> AppointmentDto:
        try:
            appt = self.repo.apply_patch(appointment_id, patch)
        except RelatedEntityNotFound as e:
            self._audit("appointment.update", appointment_id, success=False, details={"missing": e.entity})
            raise NotFoundError(f"{e.entity} not found")
        if not appt:
            raise NotFoundError("Appointment not found")
        self._audit("appointment.update", appointment_id, details={"fields": sorted(patch.present())})
        return appt

    def delete(self, appointment_id: str) -> None:
        cleaned = self.repo.delete_with_relations(appointment_id)
        if cleaned is None:
            # No existence check precedes the delete; a missing row is a data-access failure
            raise InternalError("Record to delete does not exist.")
        logger.info(f"Deleted appointment {appointment_id}, unlinked from {len(cleaned)} related appointment(s)")
        self._audit("appointment.delete", appointment_id, details={"unlinked_from": cleaned})

    def _audit(self, action: str, appointment_id: str, success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        if self.audit is not None:
            self.audit.log(action, appointment_id, success=success, details=details)

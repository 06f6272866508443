from dataclasses import replace
from datetime import datetime

import pytest

from app.application.ports.appointments_repo import (
    UNSET,
    AppointmentDto,
    AppointmentPatch,
    RelatedEntityNotFound,
)
from app.application.services.appointments_service import AppointmentsService, patch_from_payload
from app.exceptions import InternalError, NotFoundError


def make_appt(appointment_id="a1", **overrides):
    values = dict(
        id=appointment_id,
        patient_id="p1",
        doctor_id="d1",
        ambulance_id=None,
        date_time=datetime(2030, 1, 1, 9, 30),
        condition="Chest pain",
        specialization="Cardiology",
        status="NEW",
        comments="Bring previous ECG",
        description="Follow-up visit",
        prescriptions=["Aspirin 75mg"],
        tests=["ECG"],
        created_at=datetime(2029, 12, 1),
        updated_at=datetime(2029, 12, 1),
    )
    values.update(overrides)
    return AppointmentDto(**values)


class FakeApptRepo:
    def __init__(self):
        self.appts = {}
        self.related_to = {}
        self.doctors = {"d1", "d2"}
        self.calls = []

    def get_by_id(self, appointment_id):
        self.calls.append(("get_by_id", appointment_id))
        return self.appts.get(appointment_id)

    def create(self, patient_id, date_time, values):
        self.calls.append(("create", patient_id))
        if values.get("doctor_id") and values["doctor_id"] not in self.doctors:
            raise RelatedEntityNotFound("Doctor", values["doctor_id"])
        appt = make_appt("new", patient_id=patient_id, date_time=date_time, **values)
        self.appts[appt.id] = appt
        return appt

    def apply_patch(self, appointment_id, patch):
        self.calls.append(("apply_patch", appointment_id))
        appt = self.appts.get(appointment_id)
        if not appt:
            return None
        changes = patch.present()
        if "doctor_id" in changes and changes["doctor_id"] not in self.doctors:
            raise RelatedEntityNotFound("Doctor", changes["doctor_id"])
        related = changes.pop("related_appointment_id", None)
        if related is not None:
            self.related_to.setdefault(appointment_id, set()).add(related)
        updated = replace(appt, **changes)
        self.appts[appointment_id] = updated
        return updated

    def delete_with_relations(self, appointment_id):
        self.calls.append(("delete_with_relations", appointment_id))
        if appointment_id not in self.appts:
            return None
        cleaned = [ref for ref, targets in self.related_to.items() if appointment_id in targets]
        for ref in cleaned:
            self.related_to[ref].discard(appointment_id)
        del self.appts[appointment_id]
        return cleaned


class FakeAudit:
    def __init__(self):
        self.entries = []

    def log(self, action, entity_id, user_id=None, success=True, details=None):
        self.entries.append((action, entity_id, success, details))


def test_get_returns_appointment():
    repo = FakeApptRepo()
    repo.appts["a1"] = make_appt()
    svc = AppointmentsService(repo=repo)
    assert svc.get("a1").condition == "Chest pain"


def test_get_missing_raises_not_found():
    svc = AppointmentsService(repo=FakeApptRepo())
    with pytest.raises(NotFoundError) as exc:
        svc.get("missing")
    assert exc.value.status_code == 404
    assert exc.value.detail == "Appointment not found"


def test_update_leaves_absent_fields_untouched():
    repo = FakeApptRepo()
    before = make_appt()
    repo.appts["a1"] = before
    svc = AppointmentsService(repo=repo)

    after = svc.update("a1", AppointmentPatch(status="COMPLETED"))

    assert after.status == "COMPLETED"
    assert replace(after, status=before.status) == before


def test_update_writes_empty_values_explicitly():
    repo = FakeApptRepo()
    repo.appts["a1"] = make_appt()
    svc = AppointmentsService(repo=repo)

    after = svc.update("a1", patch_from_payload({"prescriptions": [], "comments": ""}))

    assert after.prescriptions == []
    assert after.comments == ""
    assert after.tests == ["ECG"]


def test_update_missing_appointment_raises_not_found():
    svc = AppointmentsService(repo=FakeApptRepo())
    with pytest.raises(NotFoundError):
        svc.update("missing", AppointmentPatch(condition="Fever"))


def test_update_unknown_doctor_raises_not_found_and_audits_failure():
    repo = FakeApptRepo()
    repo.appts["a1"] = make_appt()
    audit = FakeAudit()
    svc = AppointmentsService(repo=repo, audit=audit)

    with pytest.raises(NotFoundError) as exc:
        svc.update("a1", AppointmentPatch(doctor_id="nope"))

    assert exc.value.detail == "Doctor not found"
    assert repo.appts["a1"].doctor_id == "d1"
    assert audit.entries[-1][0] == "appointment.update"
    assert audit.entries[-1][2] is False


def test_update_audits_changed_fields():
    repo = FakeApptRepo()
    repo.appts["a1"] = make_appt()
    audit = FakeAudit()
    svc = AppointmentsService(repo=repo, audit=audit)

    svc.update("a1", AppointmentPatch(status="PENDING", comments="Call first"))

    assert audit.entries == [("appointment.update", "a1", True, {"fields": ["comments", "status"]})]


def test_delete_unlinks_referencers():
    repo = FakeApptRepo()
    repo.appts["a1"] = make_appt("a1")
    repo.appts["a2"] = make_appt("a2")
    repo.related_to["a2"] = {"a1"}
    audit = FakeAudit()
    svc = AppointmentsService(repo=repo, audit=audit)

    svc.delete("a1")

    assert "a1" not in repo.appts
    assert repo.related_to["a2"] == set()
    assert audit.entries[-1] == ("appointment.delete", "a1", True, {"unlinked_from": ["a2"]})


def test_delete_missing_is_internal_error():
    svc = AppointmentsService(repo=FakeApptRepo())
    with pytest.raises(InternalError) as exc:
        svc.delete("missing")
    assert exc.value.status_code == 500


def test_book_unknown_doctor_raises_not_found():
    svc = AppointmentsService(repo=FakeApptRepo())
    with pytest.raises(NotFoundError):
        svc.book("p1", datetime(2030, 1, 1), {"doctor_id": "nope"})


def test_patch_tracks_presence_not_truthiness():
    patch = patch_from_payload({"tests": [], "condition": ""})
    assert patch.present() == {"tests": [], "condition": ""}
    assert patch.status is UNSET
    assert AppointmentPatch().is_empty()

from datetime import datetime

import pytest
from sqlmodel import Session, select

from app.db.models import Appointment, AppointmentLink
from app.main import app
from app.routers.appointments_router import get_appointments_service
from app.application.services.appointments_service import AppointmentsService


def _link(engine, appointment_id, related_to_id):
    with Session(engine) as s:
        s.add(AppointmentLink(appointment_id=appointment_id, related_to_id=related_to_id))
        s.commit()


def test_get_appointment_includes_relations(client, engine, records):
    a = records["make_appointment"]()
    b = records["make_appointment"](condition="Palpitations")
    _link(engine, b, a)

    resp = client.get(f"/api/appointments/{a}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == a
    assert body["patient"]["name"] == "Jane Roe"
    assert body["doctor"]["specialization"] == "Cardiology"
    assert body["ambulance"] is None
    assert [r["id"] for r in body["relatedAppointments"]] == [b]
    assert body["relatedTo"] == []

    other = client.get(f"/api/appointments/{b}").json()
    assert [r["id"] for r in other["relatedTo"]] == [a]


def test_get_missing_appointment_is_404(client, records):
    resp = client.get("/api/appointments/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Appointment not found"}


def test_update_status_only_changes_status(client, records):
    a = records["make_appointment"]()
    before = client.get(f"/api/appointments/{a}").json()

    resp = client.put(f"/api/appointments/{a}", json={"status": "COMPLETED"})

    assert resp.status_code == 200
    after = resp.json()
    assert after["status"] == "COMPLETED"
    for key in ("dateTime", "condition", "specialization", "comments", "description",
                "prescriptions", "tests", "doctorId", "ambulanceId", "patientId"):
        assert after[key] == before[key]
    assert after["patient"]["id"] == records["patient_id"]


def test_update_connects_doctor_and_ambulance(client, records):
    a = records["make_appointment"]()

    resp = client.put(
        f"/api/appointments/{a}",
        json={"doctorId": records["other_doctor_id"], "ambulanceId": records["ambulance_id"]},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["doctor"]["id"] == records["other_doctor_id"]
    assert body["ambulance"]["vehicleNumber"] == "KA-01-AM-1001"


def test_update_parses_date_time(client, records):
    a = records["make_appointment"]()

    resp = client.put(f"/api/appointments/{a}", json={"dateTime": "2031-05-04T14:00:00Z"})

    assert resp.status_code == 200
    assert resp.json()["dateTime"].startswith("2031-05-04T14:00:00")


def test_update_empty_list_clears_field(client, records):
    a = records["make_appointment"]()

    resp = client.put(f"/api/appointments/{a}", json={"prescriptions": []})

    assert resp.status_code == 200
    assert resp.json()["prescriptions"] == []
    assert resp.json()["tests"] == ["ECG"]


def test_update_ignores_unknown_keys(client, records):
    a = records["make_appointment"]()

    resp = client.put(f"/api/appointments/{a}", json={"comments": "Fasting", "color": "blue"})

    assert resp.status_code == 200
    assert resp.json()["comments"] == "Fasting"


def test_update_related_appointment_links_both_directions(client, records):
    a = records["make_appointment"]()
    b = records["make_appointment"](condition="Review")

    resp = client.put(f"/api/appointments/{a}", json={"relatedAppointmentId": b})
    assert resp.status_code == 200

    assert [r["id"] for r in client.get(f"/api/appointments/{a}").json()["relatedTo"]] == [b]
    assert [r["id"] for r in client.get(f"/api/appointments/{b}").json()["relatedAppointments"]] == [a]


def test_update_validation_lists_every_issue(client, engine, records):
    a = records["make_appointment"]()

    resp = client.put(
        f"/api/appointments/{a}",
        json={"status": "DONE", "prescriptions": "Aspirin", "dateTime": "next tuesday", "comments": None},
    )

    assert resp.status_code == 400
    issues = resp.json()["error"]
    fields = {issue["loc"][-1] for issue in issues}
    assert {"status", "prescriptions", "dateTime", "comments"} <= fields

    with Session(engine) as s:
        stored = s.get(Appointment, a)
        assert stored.status == "NEW"
        assert stored.prescriptions == ["Aspirin 75mg"]


def test_update_validation_precedes_data_access(client):
    class RecordingRepo:
        def __init__(self):
            self.calls = []

        def __getattr__(self, name):
            def record(*args, **kwargs):
                self.calls.append(name)
            return record

    repo = RecordingRepo()
    app.dependency_overrides[get_appointments_service] = lambda: AppointmentsService(repo=repo)

    resp = client.put("/api/appointments/abc123", json={"status": "ARCHIVED"})

    assert resp.status_code == 400
    assert repo.calls == []


def test_update_unknown_doctor_is_404_and_changes_nothing(client, engine, records):
    a = records["make_appointment"]()

    resp = client.put(f"/api/appointments/{a}", json={"doctorId": "ghost", "comments": "changed"})

    assert resp.status_code == 404
    assert resp.json() == {"error": "Doctor not found"}
    with Session(engine) as s:
        stored = s.get(Appointment, a)
        assert stored.doctor_id == records["doctor_id"]
        assert stored.comments == "Bring previous ECG"


def test_update_missing_appointment_is_404(client, records):
    resp = client.put("/api/appointments/abc123", json={"status": "COMPLETED"})
    assert resp.status_code == 404


def test_delete_removes_appointment_from_every_related_to(client, engine, records):
    a = records["make_appointment"]()
    b = records["make_appointment"](condition="Review")
    c = records["make_appointment"](condition="Scan")
    _link(engine, b, a)
    _link(engine, c, a)
    _link(engine, a, c)

    resp = client.delete(f"/api/appointments/{a}")

    assert resp.status_code == 200
    assert resp.json() == {"message": "Appointment deleted successfully"}
    assert client.get(f"/api/appointments/{a}").status_code == 404
    assert client.get(f"/api/appointments/{b}").json()["relatedTo"] == []
    assert client.get(f"/api/appointments/{c}").json()["relatedTo"] == []
    with Session(engine) as s:
        assert s.exec(select(AppointmentLink)).all() == []


def test_delete_missing_appointment_is_500(client, records):
    resp = client.delete("/api/appointments/does-not-exist")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Record to delete does not exist."}


def test_book_appointment(client, records):
    resp = client.post(
        "/api/appointments",
        json={
            "patientId": records["patient_id"],
            "doctorId": records["doctor_id"],
            "dateTime": "2030-02-02T10:00:00",
            "condition": "Headache",
            "tests": ["MRI"],
        },
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "NEW"
    assert body["tests"] == ["MRI"]
    assert body["prescriptions"] == []
    assert client.get(f"/api/appointments/{body['id']}").status_code == 200


def test_book_appointment_unknown_patient_is_404(client, records):
    resp = client.post("/api/appointments", json={"patientId": "ghost", "dateTime": "2030-02-02T10:00:00"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Patient not found"}


@pytest.mark.parametrize("value", ["1700000000", "0", "2031-05-04", "2031-05-04 14:00", "tomorrow"])
def test_update_rejects_non_iso_date_time(client, engine, records, value):
    a = records["make_appointment"]()

    resp = client.put(f"/api/appointments/{a}", json={"dateTime": value})

    assert resp.status_code == 400
    assert [issue["loc"][-1] for issue in resp.json()["error"]] == ["dateTime"]
    with Session(engine) as s:
        assert s.get(Appointment, a).date_time == datetime(2030, 1, 1, 9, 30)


def test_update_accepts_offset_date_time_and_stores_utc(client, records):
    a = records["make_appointment"]()

    resp = client.put(f"/api/appointments/{a}", json={"dateTime": "2031-05-04T19:30:00+05:30"})

    assert resp.status_code == 200
    assert resp.json()["dateTime"].startswith("2031-05-04T14:00:00")


def test_book_rejects_date_only(client, records):
    resp = client.post("/api/appointments", json={"patientId": records["patient_id"], "dateTime": "2030-02-02"})
    assert resp.status_code == 400


def test_delete_failure_keeps_every_link(client, engine, records, monkeypatch):
    a = records["make_appointment"]()
    b = records["make_appointment"](condition="Review")
    c = records["make_appointment"](condition="Scan")
    _link(engine, b, a)
    _link(engine, a, c)

    def fail_delete(self, instance):
        raise RuntimeError("disk I/O error")

    monkeypatch.setattr(Session, "delete", fail_delete)
    resp = client.delete(f"/api/appointments/{a}")
    monkeypatch.undo()

    assert resp.status_code == 500
    with Session(engine) as s:
        links = {(l.appointment_id, l.related_to_id) for l in s.exec(select(AppointmentLink)).all()}
        assert links == {(b, a), (a, c)}
        assert s.get(Appointment, a) is not None


def test_timestamps_are_stored_naive(session, records):
    a = records["make_appointment"]()

    stored = session.get(Appointment, a)

    assert stored.created_at.tzinfo is None
    assert stored.updated_at.tzinfo is None

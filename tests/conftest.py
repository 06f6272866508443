from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session, create_engine
from sqlmodel.pool import StaticPool

from app.db.models import Ambulance, Appointment, Doctor, Patient
from app.database import get_session
from app.main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    def override_get_session():
        return session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def records(session):
    """One patient, doctor and ambulance plus a factory for appointments."""
    patient = Patient(name="Jane Roe")
    doctor = Doctor(name="Dr. Asha Rao", specialization="Cardiology")
    other_doctor = Doctor(name="Dr. Imran Sheikh", specialization="General Medicine")
    ambulance = Ambulance(vehicle_number="KA-01-AM-1001", driver_name="Ravi Kumar")
    session.add_all([patient, doctor, other_doctor, ambulance])
    session.commit()

    def make_appointment(**overrides):
        values = dict(
            patient_id=patient.id,
            doctor_id=doctor.id,
            date_time=datetime(2030, 1, 1, 9, 30),
            condition="Chest pain",
            specialization="Cardiology",
            comments="Bring previous ECG",
            description="Follow-up visit",
            prescriptions=["Aspirin 75mg"],
            tests=["ECG"],
        )
        values.update(overrides)
        appt = Appointment(**values)
        session.add(appt)
        session.commit()
        return appt.id

    return {
        "patient_id": patient.id,
        "doctor_id": doctor.id,
        "other_doctor_id": other_doctor.id,
        "ambulance_id": ambulance.id,
        "make_appointment": make_appointment,
    }

# app/db/models/health/appointment.py
from typing import Optional, List
from enum import Enum
from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
import uuid

class AppointmentStatus(str, Enum):
    NEW = "NEW"
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"
    EMERGENCY = "EMERGENCY"

class AppointmentLink(SQLModel, table=True):
    """Row (appointment_id, related_to_id) puts related_to_id in appointment_id's related_to set."""
    __tablename__ = "appointment_links"
    appointment_id: str = Field(foreign_key="appointments.id", primary_key=True)
    related_to_id: str = Field(foreign_key="appointments.id", primary_key=True)

class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    patient_id: str = Field(foreign_key="patients.id", index=True)
    doctor_id: Optional[str] = Field(default=None, foreign_key="doctors.id")
    ambulance_id: Optional[str] = Field(default=None, foreign_key="ambulances.id")
    date_time: datetime
    condition: Optional[str] = None
    specialization: Optional[str] = None
    status: AppointmentStatus = Field(default=AppointmentStatus.NEW)
    comments: Optional[str] = None
    description: Optional[str] = None
    prescriptions: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    tests: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    patient: Optional["Patient"] = Relationship(back_populates="appointments")
    doctor: Optional["Doctor"] = Relationship(back_populates="appointments")
    ambulance: Optional["Ambulance"] = Relationship(back_populates="appointments")
    related_to: List["Appointment"] = Relationship(
        back_populates="related_appointments",
        link_model=AppointmentLink,
        sa_relationship_kwargs={
            "primaryjoin": "Appointment.id == AppointmentLink.appointment_id",
            "secondaryjoin": "Appointment.id == AppointmentLink.related_to_id",
        },
    )
    related_appointments: List["Appointment"] = Relationship(
        back_populates="related_to",
        link_model=AppointmentLink,
        sa_relationship_kwargs={
            "primaryjoin": "Appointment.id == AppointmentLink.related_to_id",
            "secondaryjoin": "Appointment.id == AppointmentLink.appointment_id",
        },
    )

# app/db/models/health/ambulance.py
from typing import Optional, List
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
import uuid

class Ambulance(SQLModel, table=True):
    __tablename__ = "ambulances"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    vehicle_number: str = Field(max_length=20, unique=True)
    driver_name: Optional[str] = None
    is_available: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    appointments: List["Appointment"] = Relationship(back_populates="ambulance")

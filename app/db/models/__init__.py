# Models package (re-export feature modules for stable imports)
from .users.user import User, UserRole
from .users.session import UserSession
from .health.patient import Patient
from .health.doctor import Doctor
from .health.ambulance import Ambulance
from .health.appointment import Appointment, AppointmentLink, AppointmentStatus

__all__ = [
    "User",
    "UserRole",
    "UserSession",
    "Patient",
    "Doctor",
    "Ambulance",
    "Appointment",
    "AppointmentLink",
    "AppointmentStatus",
]

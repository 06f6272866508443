#!/usr/bin/env python3
"""
Create the tables and load a few doctors, ambulances and an admin account
so a fresh install has something to schedule against.
"""
import os
import sys

from sqlmodel import Session, select

# Add the project root to the path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from app.database import engine, create_db_and_tables
from app.db.models import Ambulance, Doctor, User, UserRole
from app.utils import hash_password

DOCTORS = [
    ("Dr. Asha Rao", "Cardiology"),
    ("Dr. Imran Sheikh", "General Medicine"),
    ("Dr. Lena Moritz", "Pediatrics"),
]

AMBULANCES = [
    ("KA-01-AM-1001", "Ravi Kumar"),
    ("KA-01-AM-1002", "Suresh Patil"),
]


def seed_database():
    print("Creating tables...")
    create_db_and_tables()

    with Session(engine) as session:
        if not session.exec(select(Doctor)).first():
            for name, specialization in DOCTORS:
                session.add(Doctor(name=name, specialization=specialization))
            print(f"Added {len(DOCTORS)} doctors")

        if not session.exec(select(Ambulance)).first():
            for vehicle_number, driver_name in AMBULANCES:
                session.add(Ambulance(vehicle_number=vehicle_number, driver_name=driver_name))
            print(f"Added {len(AMBULANCES)} ambulances")

        admin_email = os.getenv("ADMIN_EMAIL", "admin@eazydoc.local")
        if not session.exec(select(User).where(User.email == admin_email)).first():
            session.add(User(
                name="Administrator",
                email=admin_email,
                password_hash=hash_password(os.getenv("ADMIN_PASSWORD", "change-me")),
                role=UserRole.ADMIN,
            ))
            print(f"Added admin account {admin_email}")

        session.commit()

    print("Seeding completed successfully")


if __name__ == "__main__":
    seed_database()

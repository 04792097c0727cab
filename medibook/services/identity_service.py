import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.orm import Session

from medibook.auth.passwords import hash_password, verify_password
from medibook.models.availability import AvailabilityWindow
from medibook.models.user import DOCTOR_ROLE, Doctor, Patient, User
from medibook.services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def build_windows(windows: Sequence[dict[str, Any]]) -> list[AvailabilityWindow]:
    """Turn client slot dicts into unsaved rows, keeping their order and values as sent."""
    return [
        AvailabilityWindow(
            position=position,
            slot_id=window.get("id"),
            day_of_week=window.get("dayOfWeek"),
            start_time=window.get("startTime"),
            end_time=window.get("endTime"),
        )
        for position, window in enumerate(windows)
    ]


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def register_user(
    db: Session,
    *,
    email: str,
    password: str,
    name: str,
    age: int,
    gender: str,
    user_type: str,
    specialization: str | None = None,
    available_slots: Sequence[dict[str, Any]] = (),
) -> User:
    if user_type == DOCTOR_ROLE and not specialization:
        raise ValidationError("Specialization required for doctors")

    if find_user_by_email(db, email) is not None:
        raise ValidationError("User already exists with this email")

    fields = {
        "email": email,
        "hashed_password": hash_password(password),
        "name": name,
        "age": age,
        "gender": gender,
    }
    if user_type == DOCTOR_ROLE:
        user = Doctor(**fields, specialization=specialization)
        user.availability_windows = build_windows(available_slots)
    else:
        user = Patient(**fields)

    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered %s id=%s", user.role, user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = find_user_by_email(db, email)
    if user is None:
        logger.info("Login failed, unknown email")
        return None
    if not verify_password(password, user.hashed_password):
        logger.info("Login failed, bad password for user id=%s", user.id)
        return None
    return user


def list_doctors(db: Session) -> list[Doctor]:
    return db.query(Doctor).order_by(Doctor.id.asc()).all()


def get_doctor(db: Session, doctor_id: int) -> Doctor:
    doctor = db.query(Doctor).filter(Doctor.id == doctor_id).first()
    if doctor is None:
        raise NotFoundError("Doctor not found")
    return doctor


def get_patient(db: Session, patient_id: int) -> Patient:
    patient = db.query(Patient).filter(Patient.id == patient_id).first()
    if patient is None:
        raise NotFoundError("Patient not found")
    return patient


def find_doctor_by_name(db: Session, name: str) -> Doctor:
    """Exact, case-sensitive name lookup. Duplicate names resolve to the oldest doctor."""
    doctor = db.query(Doctor).filter(Doctor.name == name).order_by(Doctor.id.asc()).first()
    if doctor is None:
        raise NotFoundError("Doctor not found")
    return doctor


def serialize_window(window: AvailabilityWindow) -> dict[str, Any]:
    return {
        "id": window.slot_id,
        "startTime": window.start_time,
        "endTime": window.end_time,
        "dayOfWeek": window.day_of_week,
    }


def serialize_doctor(doctor: Doctor) -> dict[str, Any]:
    return {
        "id": doctor.id,
        "name": doctor.name,
        "specialization": doctor.specialization,
        "availableSlots": [serialize_window(window) for window in doctor.availability_windows],
    }


def serialize_user(user: User) -> dict[str, Any]:
    return {"id": user.id, "email": user.email, "name": user.name, "userType": user.role}

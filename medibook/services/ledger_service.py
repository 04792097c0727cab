from typing import Any

from sqlalchemy.orm import Session, joinedload

from medibook.models.appointment import Appointment
from medibook.models.user import DOCTOR_ROLE, PATIENT_ROLE

UNKNOWN_ID = "unknown"
UNKNOWN_NAME = "Unknown"


def serialize_appointment(appointment: Appointment) -> dict[str, Any]:
    """Join an appointment with its doctor and patient display fields."""
    doctor = appointment.doctor
    patient = appointment.patient
    return {
        "id": appointment.id,
        "doctorId": doctor.id if doctor is not None else UNKNOWN_ID,
        "patientId": patient.id if patient is not None else UNKNOWN_ID,
        "date": appointment.date.isoformat() if appointment.date else None,
        "timeSlot": appointment.time_slot,
        "purpose": appointment.purpose,
        "status": appointment.status,
        "createdAt": appointment.created_at.isoformat() if appointment.created_at else None,
        "doctorName": doctor.name if doctor is not None else UNKNOWN_NAME,
        "doctorSpecialization": doctor.specialization if doctor is not None else UNKNOWN_NAME,
        "patientName": patient.name if patient is not None else UNKNOWN_NAME,
    }


def list_for_user(db: Session, user_id: int, role: str) -> list[dict[str, Any]]:
    if role == DOCTOR_ROLE:
        criterion = Appointment.doctor_id == user_id
    elif role == PATIENT_ROLE:
        criterion = Appointment.patient_id == user_id
    else:
        raise ValueError(f"Unsupported role: {role!r}")

    # Ascending id is insertion order.
    appointments = (
        db.query(Appointment)
        .options(joinedload(Appointment.doctor), joinedload(Appointment.patient))
        .filter(criterion)
        .order_by(Appointment.id.asc())
        .all()
    )
    return [serialize_appointment(appointment) for appointment in appointments]

"""Creates appointments from patient requests.

A booking is accepted as long as the doctor and patient exist. The slot label is
not checked against the doctor's declared windows, the date's weekday is not
checked against the window's day, and nothing stops two patients (or two
concurrent requests) from taking the same doctor, date and slot.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from medibook.models.appointment import STATUS_PENDING, Appointment
from medibook.models.user import Doctor
from medibook.services.identity_service import find_doctor_by_name, get_doctor, get_patient
from medibook.services.ledger_service import serialize_appointment
from medibook.services.notifications import APPOINTMENT_BOOKED, EventBus

logger = logging.getLogger(__name__)


def resolve_doctor(db: Session, doctor_name: str | None, doctor_id: int | None = None) -> Doctor:
    """Prefer the stable id; fall back to the display name the voice flow produces."""
    if doctor_id is not None:
        return get_doctor(db, doctor_id)
    return find_doctor_by_name(db, doctor_name or "")


def create_booking(
    db: Session,
    bus: EventBus,
    patient_id: int,
    doctor_name: str | None,
    date: date,
    time_slot: str,
    purpose: str,
    doctor_id: int | None = None,
) -> dict[str, Any]:
    doctor = resolve_doctor(db, doctor_name, doctor_id)
    patient = get_patient(db, patient_id)

    appointment = Appointment(
        doctor_id=doctor.id,
        patient_id=patient.id,
        date=date,
        time_slot=time_slot,
        purpose=purpose,
        status=STATUS_PENDING,
        created_at=datetime.now(timezone.utc),
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    logger.info("Booked appointment id=%s doctor=%s patient=%s", appointment.id, doctor.id, patient.id)

    enriched = serialize_appointment(appointment)
    bus.publish(APPOINTMENT_BOOKED, enriched, recipients=(doctor.id, patient.id))
    return enriched

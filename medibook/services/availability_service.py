import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.orm import Session

from medibook.auth.dependencies import TokenIdentity
from medibook.models.availability import AvailabilityWindow
from medibook.models.user import DOCTOR_ROLE
from medibook.services.errors import AuthorizationError
from medibook.services.identity_service import build_windows, get_doctor
from medibook.services.notifications import SCHEDULE_UPDATED, EventBus

logger = logging.getLogger(__name__)


def get_windows(db: Session, doctor_id: int) -> list[AvailabilityWindow]:
    return list(get_doctor(db, doctor_id).availability_windows)


def replace_windows(
    db: Session,
    bus: EventBus,
    doctor_id: int,
    caller: TokenIdentity,
    new_windows: Sequence[dict[str, Any]] | None,
) -> list[AvailabilityWindow]:
    """Overwrite a doctor's whole window set.

    Windows are stored exactly as sent: no ordering, range or overlap checks. Two
    overlapping edits from the same doctor resolve as last write wins.
    """
    doctor = get_doctor(db, doctor_id)

    if caller.user_type != DOCTOR_ROLE or caller.id != doctor.id:
        raise AuthorizationError("Unauthorized to update this doctor's slots")

    doctor.availability_windows = build_windows(new_windows or [])
    db.commit()
    db.refresh(doctor)
    logger.info("Doctor id=%s replaced availability with %d window(s)", doctor.id, len(doctor.availability_windows))

    bus.publish(SCHEDULE_UPDATED, {"doctorId": doctor.id, "doctorName": doctor.name})
    return list(doctor.availability_windows)

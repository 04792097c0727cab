from fastapi import APIRouter, Depends
from pydantic import field_validator
from sqlalchemy.orm import Session

from medibook.auth.dependencies import TokenIdentity, get_current_user
from medibook.database import get_db
from medibook.routes.common import CamelModel, get_event_bus, service_errors
from medibook.services import availability_service, identity_service
from medibook.services.notifications import EventBus

router = APIRouter(tags=['doctors'])


class SlotPayload(CamelModel):
    """One weekly window as the client sends it. Values are stored unchecked."""

    id: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    day_of_week: int | None = None

    @field_validator('id', mode='before')
    @classmethod
    def stringify_id(cls, value):
        if value is None:
            return None
        return str(value)


class DoctorResponse(CamelModel):
    id: int
    name: str | None = None
    specialization: str | None = None
    available_slots: list[SlotPayload] = []


class UpdateSlotsRequest(CamelModel):
    available_slots: list[SlotPayload] | None = None


class UpdateSlotsResponse(CamelModel):
    message: str
    available_slots: list[SlotPayload]


@router.get('', response_model=list[DoctorResponse])
def list_doctors(db: Session = Depends(get_db)):
    with service_errors(db, 'Listing doctors'):
        doctors = identity_service.list_doctors(db)
        return [identity_service.serialize_doctor(doctor) for doctor in doctors]


@router.get('/{doctor_id}', response_model=DoctorResponse)
def get_doctor(doctor_id: int, db: Session = Depends(get_db)):
    with service_errors(db, 'Fetching doctor'):
        return identity_service.serialize_doctor(identity_service.get_doctor(db, doctor_id))


@router.put('/{doctor_id}/slots', response_model=UpdateSlotsResponse)
def update_slots(
    doctor_id: int,
    data: UpdateSlotsRequest,
    current_user: TokenIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
):
    new_windows = [slot.model_dump(by_alias=True) for slot in data.available_slots or []]
    with service_errors(db, 'Updating doctor slots'):
        windows = availability_service.replace_windows(db, bus, doctor_id, current_user, new_windows)
        return UpdateSlotsResponse(
            message='Available slots updated successfully',
            available_slots=[identity_service.serialize_window(window) for window in windows],
        )

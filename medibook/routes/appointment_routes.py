import datetime as dt

from fastapi import APIRouter, Depends, status
from pydantic import field_validator, model_validator
from sqlalchemy.orm import Session

from medibook.auth.dependencies import TokenIdentity, get_current_user, require_patient
from medibook.database import get_db
from medibook.routes.common import CamelModel, get_event_bus, service_errors
from medibook.services import booking_service, ledger_service
from medibook.services.notifications import EventBus

router = APIRouter(tags=['appointments'])


class CreateAppointmentRequest(CamelModel):
    doctor_id: int | None = None
    doctor_name: str | None = None
    date: dt.date
    time_slot: str
    purpose: str

    @field_validator('time_slot', 'purpose')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        if not value:
            raise ValueError('Field is required.')
        return value

    @model_validator(mode='after')
    def validate_doctor_reference(self):
        if self.doctor_id is None and not (self.doctor_name or '').strip():
            raise ValueError('Either doctorId or doctorName is required.')
        return self


class AppointmentResponse(CamelModel):
    id: int
    doctor_id: int | str
    patient_id: int | str
    date: dt.date | None = None
    time_slot: str | None = None
    purpose: str | None = None
    status: str
    created_at: str | None = None
    doctor_name: str | None = None
    doctor_specialization: str | None = None
    patient_name: str | None = None


class CreateAppointmentResponse(CamelModel):
    message: str
    appointment: AppointmentResponse


@router.post('', response_model=CreateAppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    current_user: TokenIdentity = Depends(require_patient),
    db: Session = Depends(get_db),
    bus: EventBus = Depends(get_event_bus),
):
    with service_errors(db, 'Appointment creation'):
        appointment = booking_service.create_booking(
            db,
            bus,
            patient_id=current_user.id,
            doctor_name=data.doctor_name,
            date=data.date,
            time_slot=data.time_slot,
            purpose=data.purpose,
            doctor_id=data.doctor_id,
        )
    return {'message': 'Appointment created successfully', 'appointment': appointment}


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(
    current_user: TokenIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    with service_errors(db, 'Listing appointments'):
        return ledger_service.list_for_user(db, current_user.id, current_user.user_type)

"""User model definitions."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from medibook.database import Base

DOCTOR_ROLE = "doctor"
PATIENT_ROLE = "patient"
USER_ROLES = (DOCTOR_ROLE, PATIENT_ROLE)
GENDERS = ("male", "female", "other")


class User(Base):
    """Represents an application user. Doctors and patients share this table."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String)
    age = Column(Integer)
    gender = Column(String)
    role = Column(String, nullable=False)  # doctor/patient

    __mapper_args__ = {"polymorphic_on": role}


class Doctor(User):
    """A user who declares weekly availability and receives bookings."""

    specialization = Column(String)

    availability_windows = relationship(
        "AvailabilityWindow",
        back_populates="doctor",
        order_by="AvailabilityWindow.position",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"polymorphic_identity": DOCTOR_ROLE}


class Patient(User):
    """A user who books appointments."""

    __mapper_args__ = {"polymorphic_identity": PATIENT_ROLE}

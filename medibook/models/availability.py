"""Availability model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from medibook.database import Base


class AvailabilityWindow(Base):
    """A recurring weekly interval declared by a doctor."""
    __tablename__ = "availability_windows"

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    slot_id = Column(String)  # opaque id chosen by the client
    day_of_week = Column(Integer)  # 0 = Sunday
    start_time = Column(String)
    end_time = Column(String)

    doctor = relationship("Doctor", back_populates="availability_windows")

    @property
    def label(self) -> str:
        return f"{self.start_time} - {self.end_time}"

from sqlalchemy import Column, Integer, DateTime, Boolean, Float, Text
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from ..core.database import Base

class AppointmentState(str, enum.Enum):
    BOOKED = "booked"
    UPDATED = "updated"
    DIAGNOSED = "diagnosed"

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)

    # Plain ids without foreign keys: deleting a user leaves these dangling
    patient_id = Column(Integer, nullable=False, index=True)
    doctor_id = Column(Integer, nullable=False, index=True)

    # Appointment details
    appointment_date_time = Column(DateTime, nullable=False, index=True)
    symptoms = Column(Text, nullable=True)
    fees = Column(Float, nullable=True)
    prescription = Column(Text, nullable=True)
    is_diagnosis_done = Column(Boolean, default=False, nullable=False)

    # Tracking
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    # Relationships
    patient = relationship(
        "User",
        primaryjoin="foreign(Appointment.patient_id) == User.id",
        viewonly=True,
        lazy="joined",
    )
    doctor = relationship(
        "User",
        primaryjoin="foreign(Appointment.doctor_id) == User.id",
        viewonly=True,
        lazy="joined",
    )

    @property
    def state(self) -> AppointmentState:
        if self.is_diagnosis_done:
            return AppointmentState.DIAGNOSED
        if self.updated_at is not None:
            return AppointmentState.UPDATED
        return AppointmentState.BOOKED

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id}, date='{self.appointment_date_time}')>"

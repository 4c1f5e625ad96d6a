from sqlalchemy.orm import Session
from datetime import datetime
from typing import List, Optional

from ..models.appointment import Appointment

class AppointmentRepository:
    """Appointment store. Performs no authorization of its own.

    Patient and doctor rows are eager-loaded with every appointment (see the
    model relationships), so listings come back already joined.
    """

    def __init__(self, db: Session):
        self.db = db

    def insert(self, appointment: Appointment) -> Appointment:
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def find_by_id(self, appointment_id: int) -> Optional[Appointment]:
        return self.db.query(Appointment).filter(Appointment.id == appointment_id).first()

    def find_by_patient(self, patient_id: int) -> List[Appointment]:
        return (
            self.db.query(Appointment)
            .filter(Appointment.patient_id == patient_id)
            .order_by(Appointment.appointment_date_time)
            .all()
        )

    def find_by_doctor(self, doctor_id: int) -> List[Appointment]:
        return (
            self.db.query(Appointment)
            .filter(Appointment.doctor_id == doctor_id)
            .order_by(Appointment.appointment_date_time)
            .all()
        )

    def list_all_joined(self) -> List[Appointment]:
        return self.db.query(Appointment).order_by(Appointment.appointment_date_time).all()

    def update(self, appointment: Appointment, **fields) -> Appointment:
        """Write the given fields and stamp updated_at. Last write wins."""
        for name, value in fields.items():
            setattr(appointment, name, value)
        appointment.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def delete(self, appointment: Appointment) -> None:
        self.db.delete(appointment)
        self.db.commit()

    def count(self) -> int:
        return self.db.query(Appointment).count()

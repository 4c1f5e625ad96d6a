from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional
import logging

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import (
    AuthError, AuthorizationError, NotFoundError, PolicyError, ValidationError
)
from ..core.security import Identity, UserRole, Weekday
from ..models.appointment import Appointment
from ..repositories import AppointmentRepository, DeletionRequestLedger, UserRepository
from ..schemas.appointment import DeletionRequest
from .policy import Operation, authorize

logger = logging.getLogger(__name__)

class AppointmentService:
    """Decides who may create, view, modify or request deletion of appointments.

    The stores are handed in already scoped to the current request; this
    class is the only place that checks roles, ownership and time windows
    before they are touched.
    """

    def __init__(
        self,
        users: UserRepository,
        appointments: AppointmentRepository,
        ledger: DeletionRequestLedger,
        settings: Settings = default_settings,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.users = users
        self.appointments = appointments
        self.ledger = ledger
        self.settings = settings
        self.clock = clock
        self._listers: Dict[UserRole, Callable[[Identity], List[Appointment]]] = {
            UserRole.PATIENT: lambda caller: self.appointments.find_by_patient(caller.user_id),
            UserRole.DOCTOR: lambda caller: self.appointments.find_by_doctor(caller.user_id),
            UserRole.ADMIN: lambda caller: self.appointments.list_all_joined(),
        }

    def _get_or_404(self, appointment_id: int) -> Appointment:
        appointment = self.appointments.find_by_id(appointment_id)
        if not appointment:
            raise NotFoundError(f"Appointment {appointment_id} not found")
        return appointment

    def _require_owner(self, caller: Identity, appointment: Appointment) -> None:
        owner_id = {
            UserRole.PATIENT: appointment.patient_id,
            UserRole.DOCTOR: appointment.doctor_id,
        }.get(caller.role)
        if caller.role != UserRole.ADMIN and owner_id != caller.user_id:
            logger.warning(
                f"User {caller.user_id} denied access to appointment {appointment.id}"
            )
            raise AuthorizationError("Appointment belongs to another user")

    def book(
        self,
        caller: Identity,
        doctor_id: int,
        appointment_date_time: datetime,
        symptoms: Optional[str] = None
    ) -> Appointment:
        authorize(caller, Operation.BOOK)

        patient = self.users.find_by_id(caller.user_id)
        if not patient:
            raise AuthError("User not found")
        if patient.role != UserRole.PATIENT:
            raise AuthorizationError(f"User {caller.user_id} is not a patient")

        doctor = self.users.find_by_id(doctor_id)
        if not doctor:
            raise NotFoundError(f"Doctor {doctor_id} not found")
        if doctor.role != UserRole.DOCTOR:
            raise ValidationError(f"User {doctor_id} is not a doctor")

        if self.settings.ENFORCE_DOCTOR_AVAILABILITY and doctor.available_days:
            weekday = Weekday.of(appointment_date_time)
            if weekday.value not in doctor.available_days:
                raise PolicyError(f"Doctor is not available on {weekday.value}")

        appointment = self.appointments.insert(Appointment(
            patient_id=caller.user_id,
            doctor_id=doctor_id,
            appointment_date_time=appointment_date_time,
            symptoms=symptoms,
            is_diagnosis_done=False,
        ))
        logger.info(
            f"Appointment {appointment.id} booked by patient {caller.user_id} "
            f"with doctor {doctor_id} at {appointment_date_time.isoformat()}"
        )
        return appointment

    def list_for_caller(self, caller: Identity) -> List[Appointment]:
        authorize(caller, Operation.LIST_APPOINTMENTS)
        return self._listers[caller.role](caller)

    def get(self, caller: Identity, appointment_id: int) -> Appointment:
        authorize(caller, Operation.VIEW_APPOINTMENT)
        appointment = self._get_or_404(appointment_id)
        self._require_owner(caller, appointment)
        return appointment

    def update_by_doctor(
        self,
        caller: Identity,
        appointment_id: int,
        fees: Optional[float] = None,
        prescription: Optional[str] = None,
        is_diagnosis_done: Optional[bool] = None
    ) -> Appointment:
        """Write the clinical fields a doctor owns. ``None`` leaves a field as is."""
        authorize(caller, Operation.UPDATE_BY_DOCTOR)
        appointment = self._get_or_404(appointment_id)
        if self.settings.ENFORCE_DOCTOR_OWNERSHIP:
            self._require_owner(caller, appointment)

        changes = {
            name: value for name, value in (
                ("fees", fees),
                ("prescription", prescription),
                ("is_diagnosis_done", is_diagnosis_done),
            ) if value is not None
        }
        if not changes:
            return appointment

        appointment = self.appointments.update(appointment, **changes)
        logger.info(
            f"Appointment {appointment_id} updated by doctor {caller.user_id}: {sorted(changes)}"
        )
        return appointment

    def update_by_patient(
        self,
        caller: Identity,
        appointment_id: int,
        symptoms: str
    ) -> Appointment:
        authorize(caller, Operation.UPDATE_BY_PATIENT)
        appointment = self._get_or_404(appointment_id)
        self._require_owner(caller, appointment)

        window = timedelta(hours=self.settings.PATIENT_EDIT_WINDOW_HOURS)
        if appointment.appointment_date_time - self.clock() < window:
            logger.info(
                f"Patient {caller.user_id} edit of appointment {appointment_id} refused inside the "
                f"{self.settings.PATIENT_EDIT_WINDOW_HOURS}h window"
            )
            raise PolicyError("Cannot modify appointment: too close to appointment time")

        appointment = self.appointments.update(appointment, symptoms=symptoms)
        logger.info(f"Appointment {appointment_id} symptoms updated by patient {caller.user_id}")
        return appointment

    def request_deletion(self, caller: Identity, appointment_id: int) -> DeletionRequest:
        authorize(caller, Operation.REQUEST_DELETION)
        appointment = self._get_or_404(appointment_id)
        self._require_owner(caller, appointment)

        request = DeletionRequest(
            appointment_id=appointment_id,
            user_id=caller.user_id,
            requested_at=self.clock(),
        )
        self.ledger.set(request)
        logger.info(f"Deletion of appointment {appointment_id} requested by patient {caller.user_id}")
        return request

    def delete(self, caller: Identity, appointment_id: int) -> None:
        authorize(caller, Operation.DELETE_APPOINTMENT)
        appointment = self._get_or_404(appointment_id)
        self.appointments.delete(appointment)
        logger.info(f"Appointment {appointment_id} deleted by admin {caller.user_id}")

    def list_deletion_requests(self, caller: Identity) -> List[DeletionRequest]:
        authorize(caller, Operation.REVIEW_DELETION_REQUESTS)
        return self.ledger.list_pending()

    def approve_deletion_request(self, caller: Identity, appointment_id: int) -> DeletionRequest:
        """Delete the appointment behind a pending request and clear the request."""
        authorize(caller, Operation.REVIEW_DELETION_REQUESTS)
        request = self.ledger.get(appointment_id)
        if request is None:
            raise NotFoundError(f"No pending deletion request for appointment {appointment_id}")

        appointment = self.appointments.find_by_id(appointment_id)
        self.ledger.discard(appointment_id)
        if not appointment:
            raise NotFoundError(f"Appointment {appointment_id} not found")

        self.appointments.delete(appointment)
        logger.info(
            f"Deletion request for appointment {appointment_id} approved by admin {caller.user_id}"
        )
        return request

    def reject_deletion_request(self, caller: Identity, appointment_id: int) -> None:
        authorize(caller, Operation.REVIEW_DELETION_REQUESTS)
        if not self.ledger.discard(appointment_id):
            raise NotFoundError(f"No pending deletion request for appointment {appointment_id}")
        logger.info(
            f"Deletion request for appointment {appointment_id} rejected by admin {caller.user_id}"
        )

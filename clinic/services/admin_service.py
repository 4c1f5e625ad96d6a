from typing import List, Optional
import io
import logging

from ..core.exceptions import NotFoundError
from ..core.security import Identity, UserRole
from ..models.user import User
from ..repositories import AppointmentRepository, UserRepository
from ..schemas.report import Report
from .policy import Operation, authorize
from .report_exporter import export_csv

logger = logging.getLogger(__name__)

class AdminService:
    """User management and reporting for admins."""

    def __init__(self, users: UserRepository, appointments: AppointmentRepository):
        self.users = users
        self.appointments = appointments

    def list_users(self, caller: Identity, role: Optional[UserRole] = None) -> List[User]:
        authorize(caller, Operation.VIEW_USERS)
        return self.users.list_all(role)

    def get_user(self, caller: Identity, user_id: int) -> User:
        authorize(caller, Operation.VIEW_USERS)
        user = self.users.find_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def delete_user(self, caller: Identity, user_id: int) -> None:
        """Delete a user. Their appointments are kept and keep pointing at the old id."""
        authorize(caller, Operation.DELETE_USER)
        user = self.users.find_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")

        self.users.delete(user)
        logger.info(f"User {user_id} deleted by admin {caller.user_id}")

    def generate_report(self, caller: Identity) -> Report:
        authorize(caller, Operation.GENERATE_REPORT)
        counts = self.users.count_by_role()
        return Report(
            doctor_count=counts[UserRole.DOCTOR],
            patient_count=counts[UserRole.PATIENT],
            appointment_count=self.appointments.count(),
        )

    def export_report(self, caller: Identity) -> io.StringIO:
        report = self.generate_report(caller)
        logger.info(f"Report exported by admin {caller.user_id}")
        return export_csv(report.rows(), fieldnames=["metric", "value"])

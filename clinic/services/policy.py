"""Role permissions for every operation the booking core exposes.

Each allowed ``(role, operation)`` pair is listed once in ``PERMISSIONS``;
anything absent is denied. Ownership and time-window rules that depend on
the target appointment live in ``AppointmentService``.
"""
from enum import Enum
from typing import FrozenSet, Tuple
import logging

from ..core.exceptions import AuthorizationError
from ..core.security import Identity, UserRole

logger = logging.getLogger(__name__)

class Operation(str, Enum):
    BOOK = "book"
    LIST_APPOINTMENTS = "list_appointments"
    VIEW_APPOINTMENT = "view_appointment"
    UPDATE_BY_DOCTOR = "update_by_doctor"
    UPDATE_BY_PATIENT = "update_by_patient"
    REQUEST_DELETION = "request_deletion"
    DELETE_APPOINTMENT = "delete_appointment"
    REVIEW_DELETION_REQUESTS = "review_deletion_requests"
    VIEW_USERS = "view_users"
    DELETE_USER = "delete_user"
    GENERATE_REPORT = "generate_report"

PERMISSIONS: FrozenSet[Tuple[UserRole, Operation]] = frozenset({
    (UserRole.PATIENT, Operation.BOOK),
    (UserRole.PATIENT, Operation.LIST_APPOINTMENTS),
    (UserRole.PATIENT, Operation.VIEW_APPOINTMENT),
    (UserRole.PATIENT, Operation.UPDATE_BY_PATIENT),
    (UserRole.PATIENT, Operation.REQUEST_DELETION),

    (UserRole.DOCTOR, Operation.LIST_APPOINTMENTS),
    (UserRole.DOCTOR, Operation.VIEW_APPOINTMENT),
    (UserRole.DOCTOR, Operation.UPDATE_BY_DOCTOR),

    (UserRole.ADMIN, Operation.LIST_APPOINTMENTS),
    (UserRole.ADMIN, Operation.VIEW_APPOINTMENT),
    (UserRole.ADMIN, Operation.DELETE_APPOINTMENT),
    (UserRole.ADMIN, Operation.REVIEW_DELETION_REQUESTS),
    (UserRole.ADMIN, Operation.VIEW_USERS),
    (UserRole.ADMIN, Operation.DELETE_USER),
    (UserRole.ADMIN, Operation.GENERATE_REPORT),
})

def is_allowed(role: UserRole, operation: Operation) -> bool:
    return (role, operation) in PERMISSIONS

def authorize(caller: Identity, operation: Operation) -> None:
    """Raise AuthorizationError unless the caller's role may perform the operation."""
    if not is_allowed(caller.role, operation):
        logger.warning(
            f"Denied {operation.value} for user {caller.user_id} with role {caller.role.value}"
        )
        raise AuthorizationError(
            f"Role '{caller.role.value}' may not perform '{operation.value}'"
        )

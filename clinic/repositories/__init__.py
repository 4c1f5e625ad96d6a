from .users import UserRepository
from .appointments import AppointmentRepository
from .deletion_requests import DeletionRequestLedger

__all__ = ["UserRepository", "AppointmentRepository", "DeletionRequestLedger"]

from .user import User
from .appointment import Appointment, AppointmentState

__all__ = ["User", "Appointment", "AppointmentState"]

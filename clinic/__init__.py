"""
Clinic Appointment Booking

A FastAPI backend where patients book appointments, doctors record fees,
prescriptions and diagnoses, and admins manage users, deletion requests
and reports.
"""

__version__ = "1.0.0"

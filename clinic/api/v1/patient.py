from fastapi import APIRouter, Depends, status
from typing import List

from ...api.deps import get_appointment_service, get_current_identity
from ...core.security import Identity
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import (
    AppointmentCreate, AppointmentResponse, DeletionRequest,
    PatientAppointmentUpdate
)

router = APIRouter(prefix="/patient", tags=["Patient"])

@router.post(
    "/appointments",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED
)
async def book_appointment(
    appointment_data: AppointmentCreate,
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Book a new appointment with a doctor."""
    return service.book(
        identity,
        appointment_data.doctor_id,
        appointment_data.appointment_date_time,
        appointment_data.symptoms
    )

@router.get("/appointments", response_model=List[AppointmentResponse])
async def list_appointments(
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    """List the caller's booked appointments."""
    return service.list_for_caller(identity)

@router.get("/appointments/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    return service.get(identity, appointment_id)

@router.put("/appointments/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: int,
    update_data: PatientAppointmentUpdate,
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Update symptoms, allowed until 24 hours before the appointment."""
    return service.update_by_patient(identity, appointment_id, update_data.symptoms)

@router.post(
    "/appointments/request-delete/{appointment_id}",
    response_model=DeletionRequest,
    status_code=status.HTTP_202_ACCEPTED
)
async def request_deletion(
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Ask an admin to remove the appointment."""
    return service.request_deletion(identity, appointment_id)

from fastapi import APIRouter, Depends
from typing import List

from ...api.deps import get_appointment_service, get_current_identity
from ...core.security import Identity
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import AppointmentDetailResponse, DoctorAppointmentUpdate

router = APIRouter(prefix="/doctor", tags=["Doctor"])

@router.get("/appointments", response_model=List[AppointmentDetailResponse])
async def list_appointments(
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    """List appointments assigned to the calling doctor."""
    return service.list_for_caller(identity)

@router.get("/appointments/{appointment_id}", response_model=AppointmentDetailResponse)
async def get_appointment(
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    """One appointment assigned to the calling doctor."""
    return service.get(identity, appointment_id)

@router.put("/appointments/{appointment_id}", response_model=AppointmentDetailResponse)
async def update_appointment(
    appointment_id: int,
    update_data: DoctorAppointmentUpdate,
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Record fees, prescription and diagnosis status."""
    return service.update_by_doctor(
        identity, appointment_id, **update_data.model_dump(exclude_unset=True)
    )

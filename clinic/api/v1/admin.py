from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from typing import List, Optional

from ...api.deps import get_admin_service, get_appointment_service, get_current_identity
from ...core.security import Identity, UserRole
from ...services.admin_service import AdminService
from ...services.appointment_service import AppointmentService
from ...services.report_exporter import REPORT_FILENAME
from ...schemas.auth import UserResponse
from ...schemas.appointment import (
    AppointmentDetailResponse, DeletionRequest, MessageResponse
)
from ...schemas.report import Report

router = APIRouter(prefix="/admin", tags=["Admin"])

# Users
@router.get("/users", response_model=List[UserResponse])
async def list_users(
    role: Optional[UserRole] = None,
    identity: Identity = Depends(get_current_identity),
    service: AdminService = Depends(get_admin_service)
):
    """List all users, optionally filtered by role."""
    return service.list_users(identity, role)

@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    identity: Identity = Depends(get_current_identity),
    service: AdminService = Depends(get_admin_service)
):
    return service.get_user(identity, user_id)

@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    identity: Identity = Depends(get_current_identity),
    service: AdminService = Depends(get_admin_service)
):
    """Delete a user. Their appointments are left in place."""
    service.delete_user(identity, user_id)
    return {"message": "User deleted successfully"}

# Appointments
@router.get("/appointments", response_model=List[AppointmentDetailResponse])
async def list_appointments(
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    """List every appointment with patient and doctor details."""
    return service.list_for_caller(identity)

@router.get("/appointments/{appointment_id}", response_model=AppointmentDetailResponse)
async def get_appointment(
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    return service.get(identity, appointment_id)

@router.delete("/appointments/{appointment_id}", response_model=MessageResponse)
async def delete_appointment(
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    service.delete(identity, appointment_id)
    return {"message": "Appointment deleted successfully"}

# Deletion requests
@router.get("/deletion-requests", response_model=List[DeletionRequest])
async def list_deletion_requests(
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    """List pending patient deletion requests, oldest first."""
    return service.list_deletion_requests(identity)

@router.post("/deletion-requests/{appointment_id}/approve", response_model=DeletionRequest)
async def approve_deletion_request(
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Delete the appointment and clear its request."""
    return service.approve_deletion_request(identity, appointment_id)

@router.delete("/deletion-requests/{appointment_id}", response_model=MessageResponse)
async def reject_deletion_request(
    appointment_id: int,
    identity: Identity = Depends(get_current_identity),
    service: AppointmentService = Depends(get_appointment_service)
):
    service.reject_deletion_request(identity, appointment_id)
    return {"message": "Deletion request rejected"}

# Reports
@router.get("/reports", response_model=Report)
async def get_report(
    identity: Identity = Depends(get_current_identity),
    service: AdminService = Depends(get_admin_service)
):
    """Totals of doctors, patients and appointments."""
    return service.generate_report(identity)

@router.get("/reports/export")
async def export_report(
    identity: Identity = Depends(get_current_identity),
    service: AdminService = Depends(get_admin_service)
):
    """Download the report as CSV."""
    buffer = service.export_report(identity)
    return StreamingResponse(
        iter([buffer.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{REPORT_FILENAME}"'}
    )

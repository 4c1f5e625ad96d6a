from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from datetime import timedelta
from typing import Optional

from ..core.config import Settings
from ..core.database import get_db, get_redis
from ..core.exceptions import AuthError
from ..core.security import security, Identity
from ..models.user import User
from ..repositories import AppointmentRepository, DeletionRequestLedger, UserRepository
from ..services.admin_service import AdminService
from ..services.appointment_service import AppointmentService
from ..services.auth_service import AuthService

def get_settings(request: Request) -> Settings:
    """Settings the application was built with."""
    return request.app.state.settings

def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)

def get_appointment_repository(db: Session = Depends(get_db)) -> AppointmentRepository:
    return AppointmentRepository(db)

def get_deletion_ledger(
    redis_client = Depends(get_redis),
    settings: Settings = Depends(get_settings)
) -> DeletionRequestLedger:
    return DeletionRequestLedger(
        redis_client, ttl=timedelta(hours=settings.DELETION_REQUEST_TTL_HOURS)
    )

def get_auth_service(
    users: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings)
) -> AuthService:
    return AuthService(users, settings=settings)

def get_appointment_service(
    users: UserRepository = Depends(get_user_repository),
    appointments: AppointmentRepository = Depends(get_appointment_repository),
    ledger: DeletionRequestLedger = Depends(get_deletion_ledger),
    settings: Settings = Depends(get_settings)
) -> AppointmentService:
    return AppointmentService(users, appointments, ledger, settings=settings)

def get_admin_service(
    users: UserRepository = Depends(get_user_repository),
    appointments: AppointmentRepository = Depends(get_appointment_repository)
) -> AdminService:
    return AdminService(users, appointments)

async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Identity:
    """Extract and verify the bearer token from the Authorization header."""
    if credentials is None:
        raise AuthError("Not authenticated")

    return auth_service.verify(credentials.credentials)

async def get_current_user(
    identity: Identity = Depends(get_current_identity),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """Get current authenticated user from database."""
    return auth_service.current_user(identity)

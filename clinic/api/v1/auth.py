from fastapi import APIRouter, Depends, status

from ...api.deps import get_auth_service, get_current_identity, get_current_user
from ...core.security import Identity
from ...services.auth_service import AuthService
from ...schemas.auth import (
    UserLogin, UserRegister, TokenResponse, UserResponse, ChangePassword
)
from ...schemas.appointment import MessageResponse
from ...models.user import User

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Register a new admin, doctor or patient."""
    user = auth_service.register(user_data)
    return UserResponse.model_validate(user)

@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: UserLogin,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Authenticate user and return an access token."""
    user, token = auth_service.login(login_data.email, login_data.password)
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
        user=UserResponse.model_validate(user)
    )

@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information."""
    return UserResponse.model_validate(current_user)

@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    password_data: ChangePassword,
    identity: Identity = Depends(get_current_identity),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Change user password."""
    auth_service.change_password(
        identity, password_data.current_password, password_data.new_password
    )
    return {"message": "Password changed successfully"}

@router.post("/verify-token")
async def verify_token_endpoint(
    identity: Identity = Depends(get_current_identity)
):
    """Verify if token is valid."""
    return {
        "valid": True,
        "user_id": identity.user_id,
        "role": identity.role,
    }

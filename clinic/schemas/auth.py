from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import List, Optional

from ..core.security import UserRole, Specialization, Weekday

class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    mobile_number: str = Field(..., min_length=7, max_length=20)
    password: str = Field(..., min_length=8, max_length=72)
    role: UserRole
    specialization: Optional[Specialization] = None
    available_days: Optional[List[Weekday]] = None

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class ChangePassword(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8, max_length=72)

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    mobile_number: str
    role: UserRole
    specialization: Optional[Specialization] = None
    available_days: Optional[List[Weekday]] = None
    created_at: datetime

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse

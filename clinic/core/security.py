from datetime import datetime, timedelta
from typing import Optional
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from fastapi.security import HTTPBearer
from pydantic import BaseModel
from enum import Enum

from .config import Settings, settings as default_settings
from .exceptions import AuthError

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Missing headers are reported as AuthError by the dependency, not by HTTPBearer
security = HTTPBearer(auto_error=False)

class UserRole(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"

class Specialization(str, Enum):
    NERVES = "nerves"
    HEART = "heart"
    LUNGS = "lungs"
    SKIN = "skin"

class Weekday(str, Enum):
    SUN = "Sun"
    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"

    @classmethod
    def of(cls, moment: datetime) -> "Weekday":
        # datetime.weekday() counts from Monday
        order = [cls.MON, cls.TUE, cls.WED, cls.THU, cls.FRI, cls.SAT, cls.SUN]
        return order[moment.weekday()]

class Identity(BaseModel):
    """Verified caller identity carried by a session token."""
    user_id: int
    role: UserRole

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int

# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)

# JWT utilities
def create_access_token(
    user_id: int,
    role: UserRole,
    expires_delta: Optional[timedelta] = None,
    settings: Settings = default_settings
) -> Token:
    """Sign an access token binding the user id and role."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(user_id),
        "role": role.value,
        "exp": datetime.utcnow() + expires_delta,
    }

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return Token(
        access_token=encoded_jwt,
        expires_in=int(expires_delta.total_seconds())
    )

def decode_access_token(token: str, settings: Settings = default_settings) -> Identity:
    """Verify a token's signature and expiry and return the identity it carries."""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except ExpiredSignatureError:
        raise AuthError("Token has expired")
    except JWTError:
        raise AuthError("Invalid token")

    try:
        return Identity(user_id=int(payload["sub"]), role=UserRole(payload["role"]))
    except (KeyError, TypeError, ValueError):
        raise AuthError("Invalid token payload")

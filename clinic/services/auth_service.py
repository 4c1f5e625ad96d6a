from sqlalchemy.exc import IntegrityError
from typing import Tuple
import logging

from ..core.config import Settings, settings as default_settings
from ..core.exceptions import AuthError, ValidationError
from ..core.security import (
    verify_password, get_password_hash, create_access_token,
    decode_access_token, Identity, Token, UserRole
)
from ..models.user import User
from ..repositories import UserRepository
from ..schemas.auth import UserRegister

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, users: UserRepository, settings: Settings = default_settings):
        self.users = users
        self.settings = settings

    def register(self, user_data: UserRegister) -> User:
        """Register a new user."""
        if self.users.find_by_email(user_data.email):
            raise ValidationError("Email already registered")

        if user_data.role != UserRole.DOCTOR and (
            user_data.specialization is not None or user_data.available_days
        ):
            raise ValidationError("Specialization and available days apply to doctors only")

        available_days = None
        if user_data.available_days:
            available_days = [day.value for day in user_data.available_days]

        try:
            new_user = self.users.insert(User(
                name=user_data.name,
                email=user_data.email,
                mobile_number=user_data.mobile_number,
                password_hash=get_password_hash(user_data.password),
                role=user_data.role,
                specialization=user_data.specialization,
                available_days=available_days,
            ))
        except IntegrityError:
            # lost a race with a concurrent registration for the same email
            raise ValidationError("Email already registered")
        logger.info(f"Registered {new_user.role.value} {new_user.id}")

        return new_user

    def login(self, email: str, password: str) -> Tuple[User, Token]:
        """Authenticate user and return an access token."""
        user = self.users.find_by_email(email)

        if not user or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login for {email}")
            raise AuthError("Invalid credentials")

        logger.info(f"User {user.id} logged in")
        return user, create_access_token(user.id, user.role, settings=self.settings)

    def verify(self, token: str) -> Identity:
        return decode_access_token(token, settings=self.settings)

    def current_user(self, identity: Identity) -> User:
        """Load the user behind a verified token."""
        user = self.users.find_by_id(identity.user_id)
        if not user:
            raise AuthError("User not found")
        return user

    def change_password(self, identity: Identity, current_password: str, new_password: str) -> None:
        user = self.current_user(identity)

        if not verify_password(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")

        self.users.update_hash(user, get_password_hash(new_password))
        logger.info(f"User {user.id} changed password")

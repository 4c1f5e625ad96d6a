from fastapi import HTTPException, status
from typing import Dict, Optional


class ClinicError(HTTPException):
    """Base class for errors raised by the booking core.

    Subclasses carry their own HTTP status so a raise anywhere in the
    service layer maps straight onto a response.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "Error"

    def __init__(self, detail: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class ValidationError(ClinicError):
    """Malformed or duplicate input at creation time."""

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "ValidationError"


class AuthError(ClinicError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "AuthError"

    def __init__(
        self,
        detail: str = "Could not validate credentials",
        headers: Optional[Dict[str, str]] = None
    ):
        super().__init__(detail, headers=headers or {"WWW-Authenticate": "Bearer"})


class AuthorizationError(AuthError):
    """Authenticated caller whose role or ownership does not permit the action."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, detail: str = "Not enough permissions"):
        ClinicError.__init__(self, detail)


class PolicyError(ClinicError):
    """Well-formed request that breaks a business rule."""

    status_code = status.HTTP_409_CONFLICT
    kind = "PolicyError"


class NotFoundError(ClinicError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "NotFoundError"

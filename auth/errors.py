"""
Error taxonomy for the auth service.

Every error carries the HTTP status it maps to and a client-safe
``message``; ``api.middleware`` renders them as
``{"success": false, "message": ...}``.
"""

from __future__ import annotations

from fastapi import status


class AuthError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message}


class ValidationError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class ConflictError(AuthError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "User already exists"


class InvalidCredentialsError(AuthError):
    """Bad login. Same message whether the account exists or not."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class UnauthorizedError(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication failed."


class StoreUnavailable(AuthError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service temporarily unavailable, please retry"

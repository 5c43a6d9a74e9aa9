"""
Auth service — signup, login and current-user lookup.

Routes stay thin: all validation, hashing and token issuance happens
here so the rules can be tested without HTTP.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import (
    ConflictError,
    InvalidCredentialsError,
    UnauthorizedError,
    ValidationError,
)
from auth.jwt import create_token
from auth.password import hash_password_async, verify_password_async
from database.helpers import (
    find_existing_identity,
    get_user_by_email,
    get_user_by_id,
    insert_user,
)
from database.models import EMAIL_MAX_LENGTH, USERNAME_MAX_LENGTH, User

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6
# bcrypt only reads the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


class PublicUser(BaseModel):
    """What clients may see of a user. Never includes the password hash."""

    id: str
    username: str
    email: str

    @classmethod
    def from_orm_user(cls, user: User) -> "PublicUser":
        return cls(id=str(user.user_id), username=user.username, email=user.email)


@dataclass
class AuthResult:
    user: PublicUser
    token: str


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def validate_signup(username: Optional[str], email: Optional[str], password: Optional[str]) -> None:
    """Raise ``ValidationError`` for the first rule the input breaks."""
    if not username or not username.strip():
        raise ValidationError("Username is required")
    if len(username.strip()) < MIN_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at least {MIN_USERNAME_LENGTH} characters")
    if len(username.strip()) > USERNAME_MAX_LENGTH:
        raise ValidationError(f"Username must be at most {USERNAME_MAX_LENGTH} characters")
    if not email or not email.strip():
        raise ValidationError("Email is required")
    if "@" not in email:
        raise ValidationError("Please provide a valid email")
    if len(normalize_email(email)) > EMAIL_MAX_LENGTH:
        raise ValidationError(f"Email must be at most {EMAIL_MAX_LENGTH} characters")
    if not password:
        raise ValidationError("Password is required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")


class AuthService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def signup(
        self,
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> AuthResult:
        validate_signup(username, email, password)
        username = username.strip()
        email = normalize_email(email)

        existing = await find_existing_identity(self.session, username, email)
        if existing is not None:
            if existing.email == email:
                raise ConflictError("User with this email already exists")
            raise ConflictError("Username is already taken")

        password_hash = await hash_password_async(password)
        user = await insert_user(self.session, username, email, password_hash)

        token = create_token(str(user.user_id))
        logger.info("Registered user %s (%s)", user.username, user.user_id)
        return AuthResult(user=PublicUser.from_orm_user(user), token=token)

    async def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        if not email or not password:
            raise ValidationError("Please provide email and password")
        if len(password.encode()) > MAX_PASSWORD_BYTES:
            # No stored password can be this long; never let bcrypt truncate it into a match.
            raise InvalidCredentialsError()

        user = await get_user_by_email(self.session, normalize_email(email))
        stored_hash = user.password_hash if user is not None else None
        if not await verify_password_async(password, stored_hash) or user is None:
            logger.info("Failed login attempt")
            raise InvalidCredentialsError()

        token = create_token(str(user.user_id))
        logger.info("Login: %s (%s)", user.username, user.user_id)
        return AuthResult(user=PublicUser.from_orm_user(user), token=token)

    async def get_user(self, user_id: str) -> PublicUser:
        user = await get_user_by_id(self.session, user_id)
        if user is None:
            raise UnauthorizedError("User not found")
        return PublicUser.from_orm_user(user)

"""
Database helper functions — credential store queries and inserts.

Driver-level connectivity failures are translated to ``StoreUnavailable``;
unique-index violations on insert become ``ConflictError``.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import func, or_, select, text
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import ConflictError, StoreUnavailable
from database.models import User

logger = logging.getLogger(__name__)


def _to_uuid(value: str | uuid.UUID) -> uuid.UUID:
    return uuid.UUID(value) if isinstance(value, str) else value


@asynccontextmanager
async def _store_call(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except (OperationalError, InterfaceError, OSError) as exc:
        logger.error("Credential store unavailable during %s: %s", operation, exc)
        raise StoreUnavailable() from exc


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    """Look up a user by (already lowercased) email."""
    async with _store_call("get_user_by_email"):
        result = await session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id: str | uuid.UUID) -> Optional[User]:
    try:
        uid = _to_uuid(user_id)
    except ValueError:
        return None
    async with _store_call("get_user_by_id"):
        result = await session.execute(select(User).where(User.user_id == uid))
        return result.scalar_one_or_none()


async def find_existing_identity(
    session: AsyncSession, username: str, email: str
) -> Optional[User]:
    """Return any user already holding ``username`` or ``email``."""
    async with _store_call("find_existing_identity"):
        result = await session.execute(
            select(User)
            .where(or_(User.username == username, func.lower(User.email) == email))
            .limit(1)
        )
        return result.scalar_one_or_none()


async def insert_user(
    session: AsyncSession, username: str, email: str, password_hash: str
) -> User:
    """
    Insert and commit a new user row.

    The unique indexes on ``username`` and ``email`` are the source of
    truth: a concurrent signup that slipped past the pre-check surfaces
    here as ``IntegrityError`` and is reported as ``ConflictError``.
    """
    user = User(
        user_id=uuid.uuid4(),
        username=username,
        email=email,
        password_hash=password_hash,
    )
    async with _store_call("insert_user"):
        session.add(user)
        try:
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            logger.info("Signup conflict on insert for %s: %s", username, exc.orig)
            raise ConflictError("User with this email or username already exists") from exc
    return user


async def ping(session: AsyncSession) -> bool:
    """Return ``True`` when the store answers a trivial query."""
    try:
        await session.execute(text("SELECT 1"))
    except (OperationalError, InterfaceError, OSError) as exc:
        logger.warning("Credential store ping failed: %s", exc)
        await session.rollback()
        return False
    return True

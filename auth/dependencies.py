"""
FastAPI dependencies for authentication.

Provides ``db_session``, ``get_auth_service`` and the
``get_current_user_id`` gate used across all protected routes.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.errors import UnauthorizedError
from auth.jwt import check_token
from auth.service import AuthService
from database.session import get_db_session

logger = logging.getLogger(__name__)

# auto_error=False: a missing or non-Bearer header is answered with our own 401 body.
_bearer_scheme = HTTPBearer(auto_error=False)


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


async def get_auth_service(session: AsyncSession = Depends(db_session)) -> AuthService:
    return AuthService(session)


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> str:
    """
    Extract and verify the Bearer token, returning the authenticated
    ``user_id`` (UUID string).  The id is also stored on
    ``request.state.user_id``.
    """
    if credentials is None or not credentials.credentials.strip():
        raise UnauthorizedError("Access denied. No token provided.")

    result = check_token(credentials.credentials.strip())
    if not result.valid:
        logger.info(
            "Rejected token on %s %s: %s",
            request.method, request.url.path, result.reason.value,
        )
        raise UnauthorizedError("Invalid or expired token.")

    request.state.user_id = result.user_id
    return result.user_id

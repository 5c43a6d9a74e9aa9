"""
Auth API routes — signup, login, me.

Route prefix: /api/auth
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from auth.dependencies import get_auth_service, get_current_user_id
from auth.service import AuthService, PublicUser

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


# ── Request / response schemas ─────────────────────────────────────────
# Field rules live in AuthService so that failures come back in a fixed order.


class SignupRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    token: str
    user: PublicUser


class MeResponse(BaseModel):
    success: bool = True
    user: PublicUser


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    req: SignupRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Register a new user."""
    result = await service.signup(req.username, req.email, req.password)
    return {
        "message": "User created successfully",
        "token": result.token,
        "user": result.user,
    }


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Login with email + password."""
    result = await service.login(req.email, req.password)
    return {
        "message": "Login successful",
        "token": result.token,
        "user": result.user,
    }


@router.get("/me", response_model=MeResponse)
async def me(
    user_id: str = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Return the user the bearer token belongs to."""
    return {"user": await service.get_user(user_id)}

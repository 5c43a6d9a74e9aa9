"""
Service routes (health and routing checks).
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session
from database.helpers import ping

router = APIRouter()


@router.get("/")
async def health(session: AsyncSession = Depends(db_session)) -> Dict[str, Any]:
    """Liveness plus a credential store probe."""
    connected = await ping(session)
    return {
        "message": "Todo App API is running!",
        "database": "connected" if connected else "disconnected",
    }


@router.get("/api/test")
async def routing_check() -> Dict[str, str]:
    return {"message": "API routing works!"}

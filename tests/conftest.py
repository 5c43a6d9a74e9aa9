"""
Shared fixtures.

Settings are read at import time, so the required environment is set
here before any application module is imported.
"""

import os
import tempfile

os.environ.setdefault("JWT_SECRET", "test-signing-secret")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///" + os.path.join(tempfile.gettempdir(), "todo-auth-unused.db"),
)
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database.session import build_engine, create_tables, get_db_session


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'users.db'}")
    await create_tables(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest_asyncio.fixture
async def client(session_factory):
    from main import app

    async def _test_session():
        async with session_factory() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_db_session] = _test_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def stub_service_client():
    """Client whose auth service is a ``MagicMock``; unhandled errors come back as 500s."""
    from unittest.mock import MagicMock

    from auth.dependencies import get_auth_service
    from main import app

    service = MagicMock()
    app.dependency_overrides[get_auth_service] = lambda: service
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c, service
    app.dependency_overrides.clear()


@pytest.fixture
def alice():
    return {"username": "alice", "email": "alice@x.com", "password": "secret1"}

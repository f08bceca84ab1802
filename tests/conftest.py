"""Shared test fixtures."""

import os

# Settings() requires JWT_SECRET at import time
os.environ.setdefault("JWT_SECRET", "test-secret")

from collections.abc import AsyncGenerator, Callable  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402

from config.settings import settings  # noqa: E402
from src.main import app  # noqa: E402
from src.vs_common.database import get_db_session  # noqa: E402


@pytest.fixture
def db_session() -> AsyncMock:
    """Stand-in AsyncSession: execute/commit/rollback are awaitable mocks."""
    return AsyncMock()


@pytest.fixture
async def client(db_session: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints without a database."""

    async def _override_db() -> AsyncGenerator[AsyncMock, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = _override_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_token() -> Callable[..., str]:
    def _make(sub: str | None = "user-1", role: str | None = None) -> str:
        claims: dict[str, str] = {}
        if sub is not None:
            claims["sub"] = sub
        if role is not None:
            claims["role"] = role
        return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    return _make

"""Integration-test fixtures (requires a migrated PostgreSQL).

Pre-condition: DATABASE_URL points at a database upgraded with
`alembic upgrade head`. Without DATABASE_URL in the environment every test in
this directory is skipped.

All integration tests share a single event loop so that the module-level
SQLAlchemy async engine pool stays valid across the session.
"""

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    skip = None if os.environ.get("DATABASE_URL") else pytest.mark.skip(reason="DATABASE_URL not set")
    for item in items:
        if "integration" not in item.path.parts:
            continue
        item.add_marker(pytest.mark.integration)
        if skip is not None:
            item.add_marker(skip)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Session-scoped async HTTP client, keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

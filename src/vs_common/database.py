from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import settings
from src.vs_common.errors import AppError, StoreError

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
    connect_args={
        # Client-side timeout (seconds) plus server-side statement timeout (ms)
        "command_timeout": settings.DB_STATEMENT_TIMEOUT_MS / 1000,
        "server_settings": {"statement_timeout": str(settings.DB_STATEMENT_TIMEOUT_MS)},
    },
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit on success, roll back on any failure.

    Store failures (driver errors, timeouts) surface as StoreError so that a
    wallet change is never committed without its paired ledger row.
    """
    try:
        yield db
        await db.commit()
    except AppError:
        await db.rollback()
        raise
    except (SQLAlchemyError, TimeoutError) as e:
        await db.rollback()
        raise StoreError(f"Ledger store failure: {type(e).__name__}") from e

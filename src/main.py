"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import asyncio
import contextlib
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.vs_admin.api.router import router as admin_router
from src.vs_common.database import engine
from src.vs_common.errors import AppError
from src.vs_common.redis_client import close_redis
from src.vs_common.response import error_response
from src.vs_gateway.middleware.request_log import RequestLogMiddleware
from src.vs_prize.api.router import router as prize_router
from src.vs_wager.api.router import router as wager_router
from src.vs_wager.application.ticker import run_expiry_ticker
from src.vs_wallet.api.router import router as wallet_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB, start the expiry ticker. Shutdown: stop it, dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

    ticker: asyncio.Task[None] | None = None
    if settings.EXPIRY_SWEEP_INTERVAL_SECONDS > 0:
        ticker = asyncio.create_task(run_expiry_ticker(settings.EXPIRY_SWEEP_INTERVAL_SECONDS))
    else:
        logger.info("Expiry ticker disabled")
    yield

    if ticker is not None:
        ticker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await ticker
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, request)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(wager_router, prefix="/api/v1")
app.include_router(wallet_router, prefix="/api/v1")
app.include_router(prize_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}

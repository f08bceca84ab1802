"""Background expiry ticker, started from the FastAPI lifespan.

Every interval, one instance (whoever takes the Redis lease) runs
detect_and_settle_expired in a fresh session. Failures are logged and the
loop keeps going.
"""

import asyncio
import logging
import os
import socket

from config.settings import settings
from src.vs_common.database import async_session_factory
from src.vs_common.redis_client import try_acquire_lease
from src.vs_wager.application.lifecycle import WagerLifecycleManager

logger = logging.getLogger(__name__)

_HOLDER = f"{socket.gethostname()}:{os.getpid()}"


async def run_expiry_sweep(lifecycle: WagerLifecycleManager, lease_ttl: int) -> int:
    """One tick. Returns the number of wagers settled or resumed."""
    if not await try_acquire_lease(settings.EXPIRY_SWEEP_LEASE_KEY, _HOLDER, lease_ttl):
        return 0
    async with async_session_factory() as db:
        results = await lifecycle.detect_and_settle_expired(db)
    return len(results)


async def run_expiry_ticker(
    interval_seconds: int, lifecycle: WagerLifecycleManager | None = None
) -> None:
    lifecycle = lifecycle or WagerLifecycleManager()
    logger.info("Expiry ticker started: interval=%ds", interval_seconds)
    while True:
        try:
            await run_expiry_sweep(lifecycle, interval_seconds)
        except Exception:
            logger.exception("Expiry sweep failed")
        await asyncio.sleep(interval_seconds)

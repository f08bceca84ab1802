"""Shared helpers for integration tests."""

import uuid
from datetime import datetime

from sqlalchemy import text

from src.vs_common.database import async_session_factory

_SEED_USDC_SQL = text("""
    INSERT INTO wallets (user_id, usdc_amount) VALUES (:user_id, :amount)
    ON CONFLICT (user_id) DO UPDATE SET usdc_amount = wallets.usdc_amount + :amount
""")


def unique_user() -> str:
    return f"it_{uuid.uuid4().hex[:12]}"


async def seed_usdc(user_id: str, amount_micro: int) -> None:
    """USDC deposits happen outside this service; tests fund wallets directly."""
    async with async_session_factory() as db:
        await db.execute(_SEED_USDC_SQL, {"user_id": user_id, "amount": amount_micro})
        await db.commit()


_SEED_WALLET_SQL = text("""
    INSERT INTO wallets (user_id) VALUES (:user_id)
    ON CONFLICT (user_id) DO UPDATE SET user_id = EXCLUDED.user_id
    RETURNING id
""")

_SEED_ENDED_WAGER_SQL = text("""
    INSERT INTO wagers (name, category, side1, side2, wager_status, winning_side,
                        wager_end_time, created_by_id, settled_at, payouts_completed_at)
    VALUES ('Seeded', 'test', 'Home', 'Away', 'ended', :winning_side,
            :end_time, 'seed', :end_time, :end_time)
    RETURNING id
""")

_SEED_PREDICTION_SQL = text("""
    INSERT INTO transactions (user_id, wallet_id, wager_id, type, currency, amount,
                              vs_amount, balance_after, side, status, created_at)
    VALUES (:user_id, :wallet_id, :wager_id, 'prediction', 'VS', :amount,
            :amount, 0, :side, 'completed', :created_at)
""")


async def seed_ended_wager(winning_side: str, end_time: datetime) -> int:
    async with async_session_factory() as db:
        result = await db.execute(
            _SEED_ENDED_WAGER_SQL, {"winning_side": winning_side, "end_time": end_time}
        )
        wager_id = int(result.scalar_one())
        await db.commit()
    return wager_id


async def seed_prediction(
    user_id: str, wager_id: int, side: str, amount_micro: int, created_at: datetime
) -> None:
    """A prediction ledger row with a chosen timestamp, for period-boundary tests."""
    async with async_session_factory() as db:
        wallet_id = (await db.execute(_SEED_WALLET_SQL, {"user_id": user_id})).scalar_one()
        await db.execute(
            _SEED_PREDICTION_SQL,
            {
                "user_id": user_id,
                "wallet_id": wallet_id,
                "wager_id": wager_id,
                "amount": -amount_micro,
                "side": side,
                "created_at": created_at,
            },
        )
        await db.commit()

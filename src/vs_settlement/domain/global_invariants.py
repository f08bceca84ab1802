"""Ledger audit checks. Each returns a list of violation strings (empty = ok).

- VS conservation: every wallet's vs_amount equals the sum of the vs_amount
  deltas on its ledger rows (VS only enters through purchases).
- Rake bound: total USDC paid for an ended wager never exceeds its post-rake
  pool converted at the VS→USDC rate.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_common.money import BPS, vs_to_usdc
from src.vs_settlement.domain.payout import PAYOUT_POOL_BPS

logger = logging.getLogger(__name__)

_VS_MISMATCH_SQL = text("""
    SELECT w.user_id, w.vs_amount, COALESCE(SUM(t.vs_amount), 0) AS ledger_vs
    FROM wallets w
    LEFT JOIN transactions t ON t.wallet_id = w.id AND t.status = 'completed'
    GROUP BY w.user_id, w.vs_amount
    HAVING w.vs_amount <> COALESCE(SUM(t.vs_amount), 0)
""")

_WAGER_PAYOUTS_SQL = text("""
    SELECT w.id, w.side1_amount + w.side2_amount AS total, COALESCE(SUM(t.amount), 0) AS paid
    FROM wagers w
    LEFT JOIN transactions t ON t.wager_id = w.id AND t.type = 'payout'
    WHERE w.wager_status = 'ended'
    GROUP BY w.id, w.side1_amount, w.side2_amount
""")


async def verify_vs_conservation(db: AsyncSession) -> list[str]:
    violations: list[str] = []
    for row in (await db.execute(_VS_MISMATCH_SQL)).fetchall():
        msg = (
            f"VS ledger mismatch: user={row.user_id} wallet={row.vs_amount} "
            f"ledger={row.ledger_vs}"
        )
        violations.append(msg)
        logger.error(msg)
    return violations


async def verify_payout_bounds(db: AsyncSession) -> list[str]:
    violations: list[str] = []
    for row in (await db.execute(_WAGER_PAYOUTS_SQL)).fetchall():
        bound = vs_to_usdc(int(row.total) * PAYOUT_POOL_BPS, BPS)
        if int(row.paid) > bound:
            msg = f"Payout exceeds pool: wager={row.id} paid={row.paid} bound={bound}"
            violations.append(msg)
            logger.error(msg)
    return violations

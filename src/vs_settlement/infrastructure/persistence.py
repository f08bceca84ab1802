"""StakeRepository — per-user winning stake aggregation from the ledger."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

_SUM_WINNING_STAKES_SQL = text("""
    SELECT user_id, COALESCE(SUM(ABS(amount)), 0) AS staked
    FROM transactions
    WHERE wager_id = :wager_id
      AND type = 'prediction'
      AND currency = 'VS'
      AND side = :side
      AND status = 'completed'
    GROUP BY user_id
""")


class StakeRepository:
    async def sum_winning_stakes(
        self, db: AsyncSession, wager_id: int, winning_side: str
    ) -> dict[str, int]:
        result = await db.execute(
            _SUM_WINNING_STAKES_SQL, {"wager_id": wager_id, "side": winning_side}
        )
        return {row.user_id: int(row.staked) for row in result.fetchall()}

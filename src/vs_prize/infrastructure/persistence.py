"""PrizeRepository — period aggregates over the ledger plus prize_runs rows.

A run's per-user amounts are frozen in prize_run_items when the run is
claimed, so a resumed run pays what the first attempt computed.

Period bounds are inclusive on both ends; the early window is
[start, early_cutoff], also inclusive.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_common.errors import InternalError
from src.vs_prize.domain.models import PrizeRun
from src.vs_prize.domain.scoring import UserActivity

_TOTAL_SPENT_SQL = text("""
    SELECT COALESCE(SUM(ABS(amount)), 0)
    FROM transactions
    WHERE type = 'prediction'
      AND currency = 'VS'
      AND status = 'completed'
      AND created_at >= :start
      AND created_at <= :end
""")

# correct_tokens: stakes whose wager has ended on the side the user picked
_USER_ACTIVITY_SQL = text("""
    SELECT
        t.user_id,
        COALESCE(SUM(ABS(t.amount)), 0) AS base_tokens,
        COALESCE(SUM(ABS(t.amount)) FILTER (
            WHERE w.winning_side IS NOT NULL AND w.winning_side = t.side
        ), 0) AS correct_tokens,
        BOOL_OR(t.created_at <= :early_cutoff) AS has_early_prediction
    FROM transactions t
    LEFT JOIN wagers w ON w.id = t.wager_id
    WHERE t.type = 'prediction'
      AND t.currency = 'VS'
      AND t.status = 'completed'
      AND t.created_at >= :start
      AND t.created_at <= :end
    GROUP BY t.user_id
    ORDER BY t.user_id
""")

_RUN_COLUMNS = "period_start, period_end, pool, total_points, status, created_at, completed_at"

_INSERT_RUN_SQL = text(f"""
    INSERT INTO prize_runs (period_start, period_end, pool, total_points, status)
    VALUES (:period_start, :period_end, :pool, :total_points, 'running')
    ON CONFLICT (period_start) DO NOTHING
    RETURNING {_RUN_COLUMNS}
""")

_GET_RUN_SQL = text(f"""
    SELECT {_RUN_COLUMNS}
    FROM prize_runs
    WHERE period_start = :period_start
""")

_COMPLETE_RUN_SQL = text("""
    UPDATE prize_runs
    SET status = 'completed', completed_at = NOW()
    WHERE period_start = :period_start AND status = 'running'
""")

_INSERT_ITEM_SQL = text("""
    INSERT INTO prize_run_items (period_start, user_id, amount)
    VALUES (:period_start, :user_id, :amount)
""")

_LIST_ITEMS_SQL = text("""
    SELECT user_id, amount
    FROM prize_run_items
    WHERE period_start = :period_start
    ORDER BY user_id
""")


def _row_to_run(row: object) -> PrizeRun:
    return PrizeRun(
        period_start=row.period_start,  # type: ignore[attr-defined]
        period_end=row.period_end,  # type: ignore[attr-defined]
        pool=row.pool,  # type: ignore[attr-defined]
        total_points=row.total_points,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        completed_at=row.completed_at,  # type: ignore[attr-defined]
    )


class PrizeRepository:
    async def compute_total_spent(
        self, db: AsyncSession, start: datetime, end: datetime
    ) -> int:
        result = await db.execute(_TOTAL_SPENT_SQL, {"start": start, "end": end})
        return max(0, int(result.scalar_one()))

    async def list_user_activity(
        self, db: AsyncSession, start: datetime, end: datetime, early_cutoff: datetime
    ) -> list[UserActivity]:
        result = await db.execute(
            _USER_ACTIVITY_SQL, {"start": start, "end": end, "early_cutoff": early_cutoff}
        )
        return [
            UserActivity(
                user_id=row.user_id,
                base_tokens=int(row.base_tokens),
                correct_tokens=int(row.correct_tokens),
                has_early_prediction=bool(row.has_early_prediction),
            )
            for row in result.fetchall()
        ]

    async def claim_run(
        self,
        db: AsyncSession,
        period_start: datetime,
        period_end: datetime,
        pool: int,
        total_points: int,
    ) -> tuple[PrizeRun, bool]:
        """Insert a running row for this period. Returns (run, created)."""
        result = await db.execute(
            _INSERT_RUN_SQL,
            {
                "period_start": period_start,
                "period_end": period_end,
                "pool": pool,
                "total_points": total_points,
            },
        )
        row = result.fetchone()
        if row is not None:
            return _row_to_run(row), True
        existing = (await db.execute(_GET_RUN_SQL, {"period_start": period_start})).fetchone()
        if existing is None:
            raise InternalError("Prize run vanished after conflict — this should never happen")
        return _row_to_run(existing), False

    async def complete_run(self, db: AsyncSession, period_start: datetime) -> None:
        await db.execute(_COMPLETE_RUN_SQL, {"period_start": period_start})

    async def save_run_items(
        self, db: AsyncSession, period_start: datetime, credits: list[tuple[str, int]]
    ) -> None:
        """Freeze the per-user amounts of a newly claimed run."""
        rows = [
            {"period_start": period_start, "user_id": user_id, "amount": amount}
            for user_id, amount in credits
            if amount > 0
        ]
        if rows:
            await db.execute(_INSERT_ITEM_SQL, rows)

    async def list_run_items(
        self, db: AsyncSession, period_start: datetime
    ) -> list[tuple[str, int]]:
        result = await db.execute(_LIST_ITEMS_SQL, {"period_start": period_start})
        return [(row.user_id, int(row.amount)) for row in result.fetchall()]

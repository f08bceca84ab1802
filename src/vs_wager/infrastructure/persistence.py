"""WagerRepository — concrete implementation of WagerRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

State changes are conditional single-statement updates:
  - transition_to_ended only matches rows still 'active' (at-most-once settlement)
  - add_stake only matches active wagers whose end time has not passed
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_common.enums import WagerSide
from src.vs_common.errors import InternalError, InvalidSideError
from src.vs_wager.domain.models import Wager

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_WAGER_COLUMNS = """
    id, name, description, category, side1, side2, image_url, is_public,
    side1_amount, side2_amount, wager_status, winning_side, wager_end_time,
    created_by_id, settled_at, payouts_completed_at, created_at, updated_at
"""

_GET_WAGER_SQL = text(f"""
    SELECT {_WAGER_COLUMNS}
    FROM wagers
    WHERE id = :wager_id
""")

_INSERT_WAGER_SQL = text(f"""
    INSERT INTO wagers
        (name, description, category, side1, side2, image_url, is_public,
         wager_end_time, created_by_id)
    VALUES
        (:name, :description, :category, :side1, :side2, :image_url, :is_public,
         :wager_end_time, :created_by_id)
    RETURNING {_WAGER_COLUMNS}
""")

_LIST_WAGERS_SQL = text(f"""
    SELECT {_WAGER_COLUMNS}
    FROM wagers
    WHERE
        (CAST(:status AS TEXT) IS NULL OR wager_status = CAST(:status AS TEXT))
        AND (CAST(:category AS TEXT) IS NULL OR category = CAST(:category AS TEXT))
        AND (CAST(:is_public AS BOOLEAN) IS NULL OR is_public = CAST(:is_public AS BOOLEAN))
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_LIST_EXPIRED_SQL = text("""
    SELECT id
    FROM wagers
    WHERE wager_status = 'active' AND wager_end_time < :now
    ORDER BY wager_end_time, id
    LIMIT :limit
""")

_LIST_UNPAID_SQL = text("""
    SELECT id
    FROM wagers
    WHERE wager_status = 'ended'
      AND payouts_completed_at IS NULL
      AND settled_at < :settled_before
    ORDER BY settled_at, id
    LIMIT :limit
""")

_TRANSITION_SQL = text(f"""
    UPDATE wagers
    SET wager_status = 'ended',
        winning_side = :winning_side,
        settled_at = :now,
        updated_at = NOW()
    WHERE id = :wager_id AND wager_status = 'active'
    RETURNING {_WAGER_COLUMNS}
""")

# Column names cannot be bound parameters: one statement per side
_ADD_STAKE_SQL = {
    WagerSide.SIDE1: text(f"""
        UPDATE wagers
        SET side1_amount = side1_amount + :amount, updated_at = NOW()
        WHERE id = :wager_id AND wager_status = 'active' AND wager_end_time > :now
        RETURNING {_WAGER_COLUMNS}
    """),
    WagerSide.SIDE2: text(f"""
        UPDATE wagers
        SET side2_amount = side2_amount + :amount, updated_at = NOW()
        WHERE id = :wager_id AND wager_status = 'active' AND wager_end_time > :now
        RETURNING {_WAGER_COLUMNS}
    """),
}

_MARK_PAID_SQL = text("""
    UPDATE wagers
    SET payouts_completed_at = NOW(), updated_at = NOW()
    WHERE id = :wager_id AND payouts_completed_at IS NULL
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_wager(row: object) -> Wager:
    return Wager(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        category=row.category,  # type: ignore[attr-defined]
        side1=row.side1,  # type: ignore[attr-defined]
        side2=row.side2,  # type: ignore[attr-defined]
        image_url=row.image_url,  # type: ignore[attr-defined]
        is_public=row.is_public,  # type: ignore[attr-defined]
        side1_amount=row.side1_amount,  # type: ignore[attr-defined]
        side2_amount=row.side2_amount,  # type: ignore[attr-defined]
        wager_status=row.wager_status,  # type: ignore[attr-defined]
        winning_side=row.winning_side,  # type: ignore[attr-defined]
        wager_end_time=row.wager_end_time,  # type: ignore[attr-defined]
        created_by_id=row.created_by_id,  # type: ignore[attr-defined]
        settled_at=row.settled_at,  # type: ignore[attr-defined]
        payouts_completed_at=row.payouts_completed_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class WagerRepository:
    async def get_wager(self, db: AsyncSession, wager_id: int) -> Wager | None:
        result = await db.execute(_GET_WAGER_SQL, {"wager_id": wager_id})
        row = result.fetchone()
        return _row_to_wager(row) if row else None

    async def create_wager(
        self,
        db: AsyncSession,
        name: str,
        description: str | None,
        category: str,
        side1: str,
        side2: str,
        image_url: str | None,
        is_public: bool,
        wager_end_time: datetime,
        created_by_id: str,
    ) -> Wager:
        result = await db.execute(
            _INSERT_WAGER_SQL,
            {
                "name": name,
                "description": description,
                "category": category,
                "side1": side1,
                "side2": side2,
                "image_url": image_url,
                "is_public": is_public,
                "wager_end_time": wager_end_time,
                "created_by_id": created_by_id,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Wager insert returned no rows — this should never happen")
        return _row_to_wager(row)

    async def list_wagers(
        self,
        db: AsyncSession,
        status: str | None,
        category: str | None,
        is_public: bool | None,
        limit: int,
    ) -> list[Wager]:
        result = await db.execute(
            _LIST_WAGERS_SQL,
            {
                "status": status,
                "category": category,
                "is_public": is_public,
                "limit": limit,
            },
        )
        return [_row_to_wager(row) for row in result.fetchall()]

    async def list_expired_active_ids(
        self, db: AsyncSession, now: datetime, limit: int
    ) -> list[int]:
        result = await db.execute(_LIST_EXPIRED_SQL, {"now": now, "limit": limit})
        return [row.id for row in result.fetchall()]

    async def list_unpaid_ended_ids(
        self, db: AsyncSession, settled_before: datetime, limit: int
    ) -> list[int]:
        result = await db.execute(
            _LIST_UNPAID_SQL, {"settled_before": settled_before, "limit": limit}
        )
        return [row.id for row in result.fetchall()]

    async def transition_to_ended(
        self, db: AsyncSession, wager_id: int, winning_side: str, now: datetime
    ) -> Wager | None:
        """Returns the ended wager, or None if it was not active (lost the race)."""
        result = await db.execute(
            _TRANSITION_SQL,
            {"wager_id": wager_id, "winning_side": winning_side, "now": now},
        )
        row = result.fetchone()
        return _row_to_wager(row) if row else None

    async def add_stake(
        self, db: AsyncSession, wager_id: int, side: str, amount: int, now: datetime
    ) -> Wager | None:
        """Returns the updated wager, or None if it is no longer open for stakes."""
        try:
            sql = _ADD_STAKE_SQL[WagerSide(side)]
        except ValueError:
            raise InvalidSideError(side) from None
        result = await db.execute(sql, {"wager_id": wager_id, "amount": amount, "now": now})
        row = result.fetchone()
        return _row_to_wager(row) if row else None

    async def mark_payouts_completed(self, db: AsyncSession, wager_id: int) -> None:
        await db.execute(_MARK_PAID_SQL, {"wager_id": wager_id})

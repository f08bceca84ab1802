"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_wager.domain.models import Wager


class WagerRepositoryProtocol(Protocol):
    async def get_wager(self, db: AsyncSession, wager_id: int) -> Wager | None: ...

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
    ) -> Wager: ...

    async def list_wagers(
        self,
        db: AsyncSession,
        status: str | None,
        category: str | None,
        is_public: bool | None,
        limit: int,
    ) -> list[Wager]: ...

    async def list_expired_active_ids(
        self, db: AsyncSession, now: datetime, limit: int
    ) -> list[int]: ...

    async def list_unpaid_ended_ids(
        self, db: AsyncSession, settled_before: datetime, limit: int
    ) -> list[int]: ...

    async def transition_to_ended(
        self, db: AsyncSession, wager_id: int, winning_side: str, now: datetime
    ) -> Wager | None: ...

    async def add_stake(
        self, db: AsyncSession, wager_id: int, side: str, amount: int, now: datetime
    ) -> Wager | None: ...

    async def mark_payouts_completed(self, db: AsyncSession, wager_id: int) -> None: ...

"""Repository Protocol — dependency inversion for testability."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_prize.domain.models import PrizeRun
from src.vs_prize.domain.scoring import UserActivity


class PrizeRepositoryProtocol(Protocol):
    async def compute_total_spent(
        self, db: AsyncSession, start: datetime, end: datetime
    ) -> int: ...

    async def list_user_activity(
        self, db: AsyncSession, start: datetime, end: datetime, early_cutoff: datetime
    ) -> list[UserActivity]: ...

    async def claim_run(
        self,
        db: AsyncSession,
        period_start: datetime,
        period_end: datetime,
        pool: int,
        total_points: int,
    ) -> tuple[PrizeRun, bool]: ...

    async def complete_run(self, db: AsyncSession, period_start: datetime) -> None: ...

    async def save_run_items(
        self, db: AsyncSession, period_start: datetime, credits: list[tuple[str, int]]
    ) -> None: ...

    async def list_run_items(
        self, db: AsyncSession, period_start: datetime
    ) -> list[tuple[str, int]]: ...

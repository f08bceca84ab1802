"""Repository Protocol for settlement reads."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession


class StakeRepositoryProtocol(Protocol):
    async def sum_winning_stakes(
        self, db: AsyncSession, wager_id: int, winning_side: str
    ) -> dict[str, int]: ...

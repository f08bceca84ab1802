"""Domain models for vs_prize — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime

from src.vs_common.enums import PrizeRunStatus


@dataclass
class PrizeRun:
    period_start: datetime
    period_end: datetime
    pool: int            # micro USDC
    total_points: int
    status: str          # PrizeRunStatus value
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == PrizeRunStatus.COMPLETED

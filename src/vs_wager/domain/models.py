"""Domain models for vs_wager — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime

from src.vs_common.enums import WagerSide, WagerStatus


@dataclass
class Wager:
    id: int
    name: str
    description: str | None
    category: str
    side1: str                       # label shown for side1
    side2: str                       # label shown for side2
    image_url: str | None
    is_public: bool
    side1_amount: int                # micro VS staked on side1
    side2_amount: int                # micro VS staked on side2
    wager_status: str                # WagerStatus value
    winning_side: str | None         # WagerSide value, None while active
    wager_end_time: datetime
    created_by_id: str
    settled_at: datetime | None = None
    payouts_completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.wager_status == WagerStatus.ACTIVE

    @property
    def total_pool(self) -> int:
        return self.side1_amount + self.side2_amount

    def stake_on(self, side: str) -> int:
        return self.side1_amount if side == WagerSide.SIDE1 else self.side2_amount

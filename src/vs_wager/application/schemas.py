"""Pydantic schemas for vs_wager API requests and responses."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.vs_common.money import micro_to_display
from src.vs_settlement.application.applier import CreditOutcome
from src.vs_settlement.domain.payout import Payout
from src.vs_wager.application.lifecycle import SettlementResult
from src.vs_wager.domain.models import Wager

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateWagerRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    category: str = Field(..., min_length=1, max_length=64)
    side1: str = Field(..., min_length=1, max_length=100)
    side2: str = Field(..., min_length=1, max_length=100)
    image_url: str | None = Field(None, max_length=500)
    is_public: bool = True
    wager_end_time: datetime


class SettleWagerRequest(BaseModel):
    # Omitted → configured default winning side
    winning_side: str | None = None


class PredictionRequest(BaseModel):
    side: str
    amount: Decimal = Field(..., gt=0, max_digits=18, decimal_places=6, description="VS to stake")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class WagerResponse(BaseModel):
    id: int
    name: str
    description: str | None
    category: str
    side1: str
    side2: str
    image_url: str | None
    is_public: bool
    side1_amount_micro: int
    side1_amount_display: str
    side2_amount_micro: int
    side2_amount_display: str
    wager_status: str
    winning_side: str | None
    wager_end_time: str
    created_by_id: str
    settled_at: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, w: Wager) -> "WagerResponse":
        return cls(
            id=w.id,
            name=w.name,
            description=w.description,
            category=w.category,
            side1=w.side1,
            side2=w.side2,
            image_url=w.image_url,
            is_public=w.is_public,
            side1_amount_micro=w.side1_amount,
            side1_amount_display=micro_to_display(w.side1_amount),
            side2_amount_micro=w.side2_amount,
            side2_amount_display=micro_to_display(w.side2_amount),
            wager_status=w.wager_status,
            winning_side=w.winning_side,
            wager_end_time=w.wager_end_time.isoformat(),
            created_by_id=w.created_by_id,
            settled_at=w.settled_at.isoformat() if w.settled_at else None,
            created_at=w.created_at.isoformat() if w.created_at else None,
        )


class WagerListResponse(BaseModel):
    items: list[WagerResponse]


class PayoutItem(BaseModel):
    user_id: str
    staked_amount_micro: int
    payout_amount_micro: int
    payout_amount_display: str
    outcome: str | None

    @classmethod
    def build(cls, payout: Payout, outcome: CreditOutcome | None) -> "PayoutItem":
        return cls(
            user_id=payout.user_id,
            staked_amount_micro=payout.staked_amount,
            payout_amount_micro=payout.payout_amount,
            payout_amount_display=micro_to_display(payout.payout_amount),
            outcome=outcome.outcome.value if outcome else None,
        )


class SettlementResponse(BaseModel):
    wager: WagerResponse
    payouts: list[PayoutItem]
    total_payout_micro: int
    resumed: bool

    @classmethod
    def from_result(cls, result: SettlementResult) -> "SettlementResponse":
        by_user = {o.user_id: o for o in result.outcomes}
        return cls(
            wager=WagerResponse.from_domain(result.wager),
            payouts=[PayoutItem.build(p, by_user.get(p.user_id)) for p in result.payouts],
            total_payout_micro=sum(p.payout_amount for p in result.payouts),
            resumed=result.resumed,
        )


class SweepResponse(BaseModel):
    settled: list[SettlementResponse]


class PredictionResponse(BaseModel):
    wager: WagerResponse
    transaction_id: int
    stake_micro: int
    vs_balance_micro: int
    vs_balance_display: str

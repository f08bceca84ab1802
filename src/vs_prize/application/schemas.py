"""Pydantic schemas for vs_prize API."""

from datetime import datetime

from pydantic import BaseModel

from src.vs_common.money import micro_to_display
from src.vs_prize.domain.period import PrizePeriod
from src.vs_prize.domain.scoring import PrizeDistribution, PrizeShare
from src.vs_settlement.application.applier import CreditOutcome


class ExecutePeriodRequest(BaseModel):
    # Both or neither; omitted → the period containing now
    start: datetime | None = None
    end: datetime | None = None


class PeriodOut(BaseModel):
    start: str
    end: str
    key: str

    @classmethod
    def from_domain(cls, period: PrizePeriod) -> "PeriodOut":
        return cls(start=period.start.isoformat(), end=period.end.isoformat(), key=period.key)


class UserPrizeItem(BaseModel):
    user_id: str
    base_tokens_micro: int
    correct_tokens_micro: int
    accuracy_bps: int
    early_multiplier_bps: int
    referral_multiplier_bps: int
    total_points: int
    share_bps: int
    prize_amount_micro: int
    prize_amount_display: str

    @classmethod
    def from_share(cls, share: PrizeShare) -> "UserPrizeItem":
        s = share.score
        return cls(
            user_id=s.user_id,
            base_tokens_micro=s.base_tokens,
            correct_tokens_micro=s.correct_tokens,
            accuracy_bps=s.accuracy_bps,
            early_multiplier_bps=s.early_multiplier_bps,
            referral_multiplier_bps=s.referral_multiplier_bps,
            total_points=s.total_points,
            share_bps=share.share_bps,
            prize_amount_micro=share.prize_amount,
            prize_amount_display=micro_to_display(share.prize_amount),
        )


class PrizePreviewResponse(BaseModel):
    period: PeriodOut
    total_spent_micro: int
    total_spent_display: str
    pool_micro: int
    pool_display: str
    total_points: int
    users: list[UserPrizeItem]

    @classmethod
    def build(cls, period: PrizePeriod, dist: PrizeDistribution) -> "PrizePreviewResponse":
        return cls(
            period=PeriodOut.from_domain(period),
            total_spent_micro=dist.total_spent,
            total_spent_display=micro_to_display(dist.total_spent),
            pool_micro=dist.pool,
            pool_display=micro_to_display(dist.pool),
            total_points=dist.total_points,
            users=[UserPrizeItem.from_share(s) for s in dist.shares],
        )


class PrizeCreditItem(BaseModel):
    user_id: str
    prize_amount_micro: int
    prize_amount_display: str
    outcome: str
    transaction_id: int | None
    error: str | None

    @classmethod
    def from_outcome(cls, o: CreditOutcome) -> "PrizeCreditItem":
        return cls(
            user_id=o.user_id,
            prize_amount_micro=o.amount,
            prize_amount_display=micro_to_display(o.amount),
            outcome=o.outcome.value,
            transaction_id=o.transaction_id,
            error=o.error,
        )


class PrizeExecuteResponse(BaseModel):
    period: PeriodOut
    pool_micro: int
    pool_display: str
    total_points: int
    resumed: bool
    completed: bool
    applied: list[PrizeCreditItem]

"""Prize pool, engagement points and pro-rata distribution — pure functions.

    pool         = S * 7.5% * VS_TO_USDC                      (micro USDC)
    total_points = base * referral * early * (correct / base)
                 = correct * referral * early                 (base > 0)
    prize_i      = pool * points_i / sum(points)              (rounded down)

Multipliers are basis points so every step stays in integers.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from src.vs_common.money import BPS, pro_rata, vs_to_usdc

PRIZE_RATE_BPS = 750
BASE_MULTIPLIER_BPS = 10_000
EARLY_MULTIPLIER_BPS = 20_000
REFERRAL_MULTIPLIER_BPS = 10_000  # no referral program yet, always 1.0x


@dataclass(frozen=True)
class UserActivity:
    """One user's prediction activity inside a period (micro VS)."""

    user_id: str
    base_tokens: int
    correct_tokens: int
    has_early_prediction: bool


@dataclass(frozen=True)
class UserScore:
    user_id: str
    base_tokens: int
    correct_tokens: int
    accuracy_bps: int
    early_multiplier_bps: int
    referral_multiplier_bps: int
    total_points: int


@dataclass(frozen=True)
class PrizeShare:
    score: UserScore
    share_bps: int
    prize_amount: int  # micro USDC

    @property
    def user_id(self) -> str:
        return self.score.user_id


@dataclass(frozen=True)
class PrizeDistribution:
    total_spent: int   # S, micro VS
    pool: int          # micro USDC
    total_points: int
    shares: list[PrizeShare]

    @property
    def total_awarded(self) -> int:
        return sum(s.prize_amount for s in self.shares)


def compute_pool(total_spent: int) -> int:
    return vs_to_usdc(max(total_spent, 0) * PRIZE_RATE_BPS, BPS)


def score_user(activity: UserActivity) -> UserScore:
    base = max(activity.base_tokens, 0)
    correct = min(max(activity.correct_tokens, 0), base)
    early = EARLY_MULTIPLIER_BPS if activity.has_early_prediction else BASE_MULTIPLIER_BPS
    if base == 0:
        accuracy_bps = 0
        points = 0
    else:
        accuracy_bps = correct * BPS // base
        points = correct * REFERRAL_MULTIPLIER_BPS * early // (BPS * BPS)
    return UserScore(
        user_id=activity.user_id,
        base_tokens=base,
        correct_tokens=correct,
        accuracy_bps=accuracy_bps,
        early_multiplier_bps=early,
        referral_multiplier_bps=REFERRAL_MULTIPLIER_BPS,
        total_points=points,
    )


def distribute(total_spent: int, activities: Iterable[UserActivity]) -> PrizeDistribution:
    """Score every user and split the pool by points, ordered by user_id."""
    pool = compute_pool(total_spent)
    scores = sorted((score_user(a) for a in activities), key=lambda s: s.user_id)
    total_points = sum(s.total_points for s in scores)
    shares = [
        PrizeShare(
            score=s,
            share_bps=pro_rata(BPS, s.total_points, total_points),
            prize_amount=pro_rata(pool, s.total_points, total_points),
        )
        for s in scores
    ]
    return PrizeDistribution(
        total_spent=max(total_spent, 0), pool=pool, total_points=total_points, shares=shares
    )

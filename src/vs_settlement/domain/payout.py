"""Pari-mutuel payout calculation — pure function, no I/O.

Given a wager's side totals and the per-user winning stakes:

    T  = side1_amount + side2_amount           (micro VS)
    P  = T * PAYOUT_POOL_BPS / BPS             (pool after 11% rake)
    C  = stake total on the winning side
    Wi = Ui / C * P * VS_TO_USDC               (micro USDC)

The whole chain is folded into one numerator/denominator pair so rounding
happens exactly once, downward. Hence sum(Wi) <= P * VS_TO_USDC always.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from src.vs_common.enums import WagerSide
from src.vs_common.errors import InvalidSideError
from src.vs_common.money import BPS, vs_to_usdc
from src.vs_wager.domain.models import Wager

PAYOUT_POOL_BPS = 8_900  # winners share 89% of the total pool


@dataclass(frozen=True)
class Payout:
    user_id: str
    payout_amount: int   # micro USDC
    staked_amount: int   # micro VS on the winning side


def payout_pool_usdc(wager: Wager) -> int:
    """P * R in micro USDC: the upper bound for a wager's total payout."""
    return vs_to_usdc(wager.total_pool * PAYOUT_POOL_BPS, BPS)


def compute_payouts(
    wager: Wager,
    winning_side: str,
    stakes: Mapping[str, int],
) -> list[Payout]:
    """Split the post-rake pool among winning-side stakers, ordered by user_id.

    stakes maps user_id -> micro VS staked on the winning side. Users whose
    payout rounds down to zero are omitted; an empty winning side pays nobody.
    """
    if winning_side not in (WagerSide.SIDE1, WagerSide.SIDE2):
        raise InvalidSideError(winning_side)

    total = wager.total_pool
    winning_total = wager.stake_on(winning_side)
    if winning_total <= 0 or total <= 0:
        return []

    payouts: list[Payout] = []
    for user_id in sorted(stakes):
        staked = stakes[user_id]
        if staked <= 0:
            continue
        amount = vs_to_usdc(staked * total * PAYOUT_POOL_BPS, winning_total * BPS)
        if amount <= 0:
            continue
        payouts.append(Payout(user_id=user_id, payout_amount=amount, staked_amount=staked))
    return payouts

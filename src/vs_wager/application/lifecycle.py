"""WagerLifecycleManager — active → ended transition plus payout application.

A wager ends exactly once: the transition is a conditional UPDATE that only
matches rows still 'active', and only the caller whose update returned a row
computes and applies payouts. Payout credits are idempotent per
(user, wager), so a settlement interrupted half way is finished later by the
expiry sweep (see resume_payouts) without paying anyone twice.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.vs_common.database import unit_of_work
from src.vs_common.datetime_utils import utc_now
from src.vs_common.enums import ApplyOutcome, WagerSide
from src.vs_common.errors import (
    AppError,
    InvalidSideError,
    NotWagerCreatorError,
    WagerAlreadySettledError,
    WagerNotFoundError,
    WinningSideRequiredError,
)
from src.vs_settlement.application.applier import CreditOutcome, LedgerApplier
from src.vs_settlement.domain.payout import Payout, compute_payouts
from src.vs_settlement.domain.repository import StakeRepositoryProtocol
from src.vs_settlement.infrastructure.persistence import StakeRepository
from src.vs_wager.domain.models import Wager
from src.vs_wager.domain.repository import WagerRepositoryProtocol
from src.vs_wager.infrastructure.persistence import WagerRepository

logger = logging.getLogger(__name__)

SWEEP_BATCH_LIMIT = 100
# Ended wagers younger than this may still be paying out in another request
UNPAID_RESUME_GRACE = timedelta(minutes=5)


@dataclass
class SettlementResult:
    wager: Wager
    payouts: list[Payout] = field(default_factory=list)
    outcomes: list[CreditOutcome] = field(default_factory=list)
    resumed: bool = False

    @property
    def complete(self) -> bool:
        return all(o.outcome != ApplyOutcome.FAILED for o in self.outcomes)


class WagerLifecycleManager:
    def __init__(
        self,
        wager_repo: WagerRepositoryProtocol | None = None,
        stake_repo: StakeRepositoryProtocol | None = None,
        applier: LedgerApplier | None = None,
        default_winning_side: str | None = settings.DEFAULT_WINNING_SIDE,
    ) -> None:
        self._wager_repo: WagerRepositoryProtocol = wager_repo or WagerRepository()
        self._stake_repo: StakeRepositoryProtocol = stake_repo or StakeRepository()
        self._applier = applier or LedgerApplier()
        self._default_side = default_winning_side or None

    def resolve_winning_side(self, wager_id: int, winning_side: str | None) -> str | None:
        """Explicit side wins; otherwise the configured default (None if disabled)."""
        if winning_side is not None:
            if winning_side not in (WagerSide.SIDE1, WagerSide.SIDE2):
                raise InvalidSideError(winning_side)
            return WagerSide(winning_side).value
        if self._default_side is None:
            return None
        logger.warning(
            "No winning side given for wager %d, applying default winning side %s",
            wager_id, self._default_side,
        )
        return self._default_side

    async def settle_wager(
        self,
        db: AsyncSession,
        wager_id: int,
        winning_side: str | None = None,
        caller_id: str | None = None,
    ) -> SettlementResult:
        wager = await self._wager_repo.get_wager(db, wager_id)
        if wager is None:
            raise WagerNotFoundError(wager_id)
        if caller_id is not None and wager.created_by_id != caller_id:
            raise NotWagerCreatorError(wager_id)
        if not wager.is_active:
            raise WagerAlreadySettledError(wager_id)

        side = self.resolve_winning_side(wager_id, winning_side)
        if side is None:
            raise WinningSideRequiredError(wager_id)
        return await self._transition_and_pay(db, wager_id, side)

    async def settle_expired(self, db: AsyncSession, wager: Wager) -> SettlementResult | None:
        """Promote an expired wager. Returns None if another caller got there first."""
        side = self.resolve_winning_side(wager.id, None)
        if side is None:
            logger.info("Wager %d expired, awaiting creator settlement", wager.id)
            return None
        try:
            return await self._transition_and_pay(db, wager.id, side)
        except WagerAlreadySettledError:
            return None

    async def resume_payouts(self, db: AsyncSession, wager_id: int) -> SettlementResult | None:
        wager = await self._wager_repo.get_wager(db, wager_id)
        if wager is None or wager.is_active or wager.payouts_completed_at is not None:
            return None
        logger.warning("Resuming incomplete payouts for wager %d", wager_id)
        return await self._pay(db, wager, resumed=True)

    async def detect_and_settle_expired(
        self, db: AsyncSession, now: datetime | None = None
    ) -> list[SettlementResult]:
        """Settle every active wager past its end time, then finish unpaid ones.

        Per-wager failures are rolled back, logged and skipped.
        """
        now = now or utc_now()
        results: list[SettlementResult] = []

        expired_ids = await self._wager_repo.list_expired_active_ids(db, now, SWEEP_BATCH_LIMIT)
        for wager_id in expired_ids:
            try:
                wager = await self._wager_repo.get_wager(db, wager_id)
                if wager is None or not wager.is_active:
                    continue
                result = await self.settle_expired(db, wager)
            except (AppError, SQLAlchemyError):
                await db.rollback()
                logger.exception("Expiry settlement failed for wager %d", wager_id)
                continue
            if result is not None:
                results.append(result)

        unpaid_ids = await self._wager_repo.list_unpaid_ended_ids(
            db, now - UNPAID_RESUME_GRACE, SWEEP_BATCH_LIMIT
        )
        for wager_id in unpaid_ids:
            try:
                result = await self.resume_payouts(db, wager_id)
            except (AppError, SQLAlchemyError):
                await db.rollback()
                logger.exception("Payout resume failed for wager %d", wager_id)
                continue
            if result is not None:
                results.append(result)

        if results:
            logger.info(
                "Expiry sweep: settled=%d resumed=%d",
                sum(1 for r in results if not r.resumed),
                sum(1 for r in results if r.resumed),
            )
        return results

    async def _transition_and_pay(
        self, db: AsyncSession, wager_id: int, side: str
    ) -> SettlementResult:
        async with unit_of_work(db):
            ended = await self._wager_repo.transition_to_ended(db, wager_id, side, utc_now())
        if ended is None:
            # Lost the race to another settler
            raise WagerAlreadySettledError(wager_id)
        logger.info(
            "Wager settled: id=%d winning_side=%s side1=%d side2=%d",
            ended.id, side, ended.side1_amount, ended.side2_amount,
        )
        return await self._pay(db, ended, resumed=False)

    async def _pay(self, db: AsyncSession, wager: Wager, resumed: bool) -> SettlementResult:
        side = wager.winning_side
        if side is None:
            raise WinningSideRequiredError(wager.id)
        stakes = await self._stake_repo.sum_winning_stakes(db, wager.id, side)
        payouts = compute_payouts(wager, side, stakes)
        outcomes = await self._applier.apply_payouts(db, wager.id, payouts)
        result = SettlementResult(wager=wager, payouts=payouts, outcomes=outcomes, resumed=resumed)

        if result.complete:
            async with unit_of_work(db):
                await self._wager_repo.mark_payouts_completed(db, wager.id)
        else:
            logger.warning(
                "Wager %d has failed payouts, left for the next sweep to resume", wager.id
            )
        return result

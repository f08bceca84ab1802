"""PrizeApplicationService — preview and execute biweekly prize periods.

execute_period claims a prize_runs row keyed by period start before paying.
A completed run is never paid again. A run left 'running' by a crash is
resumed from the per-user amounts frozen when it was claimed; users already
credited are skipped by the ledger's unique (type, user_id, reference_id)
index.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.vs_common.database import unit_of_work
from src.vs_common.datetime_utils import ensure_utc, utc_now
from src.vs_common.enums import ApplyOutcome, TransactionType
from src.vs_common.errors import InvalidPeriodError, PrizePeriodAlreadyExecutedError
from src.vs_common.money import micro_to_display
from src.vs_prize.application.schemas import (
    PeriodOut,
    PrizeCreditItem,
    PrizeExecuteResponse,
    PrizePreviewResponse,
)
from src.vs_prize.domain.period import PrizePeriod, resolve_period
from src.vs_prize.domain.repository import PrizeRepositoryProtocol
from src.vs_prize.domain.scoring import PrizeDistribution, distribute
from src.vs_prize.infrastructure.persistence import PrizeRepository
from src.vs_settlement.application.applier import LedgerApplier

logger = logging.getLogger(__name__)


class PrizeApplicationService:
    def __init__(
        self,
        repo: PrizeRepositoryProtocol | None = None,
        applier: LedgerApplier | None = None,
        anchor: datetime = settings.PRIZE_PERIOD_ANCHOR,
    ) -> None:
        self._repo: PrizeRepositoryProtocol = repo or PrizeRepository()
        self._applier = applier or LedgerApplier()
        self._anchor = anchor

    def resolve(
        self, start: datetime | None, end: datetime | None, now: datetime | None = None
    ) -> PrizePeriod:
        return resolve_period(start, end, now or utc_now(), self._anchor)

    async def compute_distribution(
        self, db: AsyncSession, period: PrizePeriod
    ) -> PrizeDistribution:
        total_spent = await self._repo.compute_total_spent(db, period.start, period.end)
        activity = await self._repo.list_user_activity(
            db, period.start, period.end, period.early_cutoff
        )
        return distribute(total_spent, activity)

    async def preview_period(
        self,
        db: AsyncSession,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> PrizePreviewResponse:
        period = self.resolve(start, end)
        dist = await self.compute_distribution(db, period)
        return PrizePreviewResponse.build(period, dist)

    async def execute_period(
        self,
        db: AsyncSession,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> PrizeExecuteResponse:
        period = self.resolve(start, end)
        dist = await self.compute_distribution(db, period)
        credits = [(s.user_id, s.prize_amount) for s in dist.shares if s.prize_amount > 0]

        async with unit_of_work(db):
            run, created = await self._repo.claim_run(
                db, period.start, period.end, dist.pool, dist.total_points
            )
            if created:
                await self._repo.save_run_items(db, period.start, credits)
        if run.is_completed:
            raise PrizePeriodAlreadyExecutedError(period.key)
        if ensure_utc(run.period_end) != period.end:
            raise InvalidPeriodError(
                f"a run for {period.key} already exists with end {run.period_end.isoformat()}"
            )
        if not created:
            # Pay the amounts frozen by the first attempt, not a fresh distribution
            logger.warning("Resuming interrupted prize run for period %s", period.key)
            credits = await self._repo.list_run_items(db, period.start)

        outcomes = await self._applier.apply_credits(
            db,
            credits,
            TransactionType.BIWEEKLY_PRIZE,
            reference_id=period.reference_id,
            wager_id=None,
            description=f"Biweekly prize for period starting {period.key}",
        )
        completed = all(o.outcome != ApplyOutcome.FAILED for o in outcomes)
        if completed:
            async with unit_of_work(db):
                await self._repo.complete_run(db, period.start)
        else:
            logger.warning("Prize run %s has failed credits, left running for retry", period.key)

        logger.info(
            "Prize period executed: period=%s pool=%d users=%d applied=%d",
            period.key,
            run.pool,
            len(outcomes),
            sum(1 for o in outcomes if o.outcome == ApplyOutcome.APPLIED),
        )
        return PrizeExecuteResponse(
            period=PeriodOut.from_domain(period),
            pool_micro=run.pool,
            pool_display=micro_to_display(run.pool),
            total_points=run.total_points,
            resumed=not created,
            completed=completed,
            applied=[PrizeCreditItem.from_outcome(o) for o in outcomes],
        )

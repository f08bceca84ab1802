"""WagerApplicationService — creation, reads and prediction placement.

Reads run the expiry sweep first so an expired wager is never shown as
active. Predictions debit VS, add to the side total and append the ledger row
in a single unit of work.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_common.database import unit_of_work
from src.vs_common.datetime_utils import ensure_utc, utc_now
from src.vs_common.enums import WagerSide, WagerStatus
from src.vs_common.errors import (
    InvalidAmountError,
    InvalidSideError,
    InvalidWagerError,
    WagerNotActiveError,
    WagerNotFoundError,
)
from src.vs_common.money import micro_to_display, to_micro
from src.vs_wager.application.lifecycle import SettlementResult, WagerLifecycleManager
from src.vs_wager.application.schemas import (
    CreateWagerRequest,
    PredictionResponse,
    WagerListResponse,
    WagerResponse,
)
from src.vs_wager.domain.repository import WagerRepositoryProtocol
from src.vs_wager.infrastructure.persistence import WagerRepository
from src.vs_wallet.domain.repository import WalletRepositoryProtocol
from src.vs_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class WagerApplicationService:
    def __init__(
        self,
        repo: WagerRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
        lifecycle: WagerLifecycleManager | None = None,
    ) -> None:
        self._repo: WagerRepositoryProtocol = repo or WagerRepository()
        self._wallet_repo: WalletRepositoryProtocol = wallet_repo or WalletRepository()
        self._lifecycle = lifecycle or WagerLifecycleManager(wager_repo=self._repo)

    async def create_wager(
        self, db: AsyncSession, user_id: str, req: CreateWagerRequest
    ) -> WagerResponse:
        end_time = ensure_utc(req.wager_end_time)
        if end_time <= utc_now():
            raise InvalidWagerError("wager_end_time must be in the future")
        if req.side1.strip().lower() == req.side2.strip().lower():
            raise InvalidWagerError("side labels must differ")

        async with unit_of_work(db):
            wager = await self._repo.create_wager(
                db,
                name=req.name.strip(),
                description=req.description,
                category=req.category.strip(),
                side1=req.side1.strip(),
                side2=req.side2.strip(),
                image_url=req.image_url,
                is_public=req.is_public,
                wager_end_time=end_time,
                created_by_id=user_id,
            )
        logger.info("Wager created: id=%d by=%s ends=%s", wager.id, user_id, end_time.isoformat())
        return WagerResponse.from_domain(wager)

    async def list_wagers(
        self,
        db: AsyncSession,
        status: str | None,
        category: str | None,
        is_public: bool | None,
        limit: int,
    ) -> WagerListResponse:
        await self._lifecycle.detect_and_settle_expired(db)
        wagers = await self._repo.list_wagers(db, status, category, is_public, limit)
        return WagerListResponse(items=[WagerResponse.from_domain(w) for w in wagers])

    async def get_wager(self, db: AsyncSession, wager_id: int) -> WagerResponse:
        await self._lifecycle.detect_and_settle_expired(db)
        wager = await self._repo.get_wager(db, wager_id)
        if wager is None:
            raise WagerNotFoundError(wager_id)
        return WagerResponse.from_domain(wager)

    async def settle_wager(
        self,
        db: AsyncSession,
        wager_id: int,
        winning_side: str | None,
        caller_id: str,
    ) -> SettlementResult:
        return await self._lifecycle.settle_wager(db, wager_id, winning_side, caller_id)

    async def detect_and_settle_expired(
        self, db: AsyncSession, now: datetime | None = None
    ) -> list[SettlementResult]:
        return await self._lifecycle.detect_and_settle_expired(db, now)

    async def place_prediction(
        self,
        db: AsyncSession,
        wager_id: int,
        user_id: str,
        side: str,
        amount: Decimal,
    ) -> PredictionResponse:
        if side not in (WagerSide.SIDE1, WagerSide.SIDE2):
            raise InvalidSideError(side)
        try:
            stake = to_micro(amount)
        except ValueError as e:
            raise InvalidAmountError(str(e)) from None
        if stake <= 0:
            raise InvalidAmountError("amount must be positive")

        wager = await self._repo.get_wager(db, wager_id)
        if wager is None:
            raise WagerNotFoundError(wager_id)
        if wager.wager_status != WagerStatus.ACTIVE:
            raise WagerNotActiveError(wager_id)

        now = utc_now()
        if now >= ensure_utc(wager.wager_end_time):
            await self._lifecycle.settle_expired(db, wager)
            raise WagerNotActiveError(wager_id)

        async with unit_of_work(db):
            wallet, tx = await self._wallet_repo.debit_vs_for_prediction(
                db, user_id, stake, wager_id, side
            )
            updated = await self._repo.add_stake(db, wager_id, side, stake, now)
            if updated is None:
                # Ended or expired since the read above; the debit is rolled back
                raise WagerNotActiveError(wager_id)

        logger.info(
            "Prediction placed: wager=%d user=%s side=%s stake=%d tx=%d",
            wager_id, user_id, side, stake, tx.id,
        )
        return PredictionResponse(
            wager=WagerResponse.from_domain(updated),
            transaction_id=tx.id,
            stake_micro=stake,
            vs_balance_micro=wallet.vs_amount,
            vs_balance_display=micro_to_display(wallet.vs_amount),
        )

"""LedgerApplier — applies USDC credits one user at a time.

Each credit is its own unit of work: wallet increment plus the paired ledger
row, committed together or not at all. A unique index on
(type, user_id, reference_id) makes every credit at-most-once, so a batch can
be re-run after a crash and only the missing users are paid.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_common.database import unit_of_work
from src.vs_common.enums import ApplyOutcome, TransactionType
from src.vs_common.errors import AlreadyCreditedError, AppError
from src.vs_settlement.domain.payout import Payout
from src.vs_wallet.domain.repository import WalletRepositoryProtocol
from src.vs_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreditOutcome:
    user_id: str
    amount: int
    outcome: ApplyOutcome
    transaction_id: int | None = None
    error: str | None = None


class LedgerApplier:
    def __init__(self, wallet_repo: WalletRepositoryProtocol | None = None) -> None:
        self._wallet_repo: WalletRepositoryProtocol = wallet_repo or WalletRepository()

    async def apply_credits(
        self,
        db: AsyncSession,
        credits: Iterable[tuple[str, int]],
        tx_type: TransactionType,
        reference_id: str,
        wager_id: int | None,
        description: str,
    ) -> list[CreditOutcome]:
        outcomes: list[CreditOutcome] = []
        for user_id, amount in credits:
            if amount <= 0:
                continue
            try:
                async with unit_of_work(db):
                    _, tx = await self._wallet_repo.credit_usdc_once(
                        db, user_id, amount, tx_type.value, reference_id, wager_id, description
                    )
            except AlreadyCreditedError:
                logger.info(
                    "%s already credited, skipping: user=%s ref=%s",
                    tx_type.value, user_id, reference_id,
                )
                outcomes.append(CreditOutcome(user_id, amount, ApplyOutcome.SKIPPED))
                continue
            except AppError as e:
                logger.error(
                    "%s credit failed: user=%s ref=%s amount=%d: %s",
                    tx_type.value, user_id, reference_id, amount, e.message,
                    exc_info=True,
                )
                outcomes.append(
                    CreditOutcome(user_id, amount, ApplyOutcome.FAILED, error=e.message)
                )
                continue
            outcomes.append(CreditOutcome(user_id, amount, ApplyOutcome.APPLIED, tx.id))
        return outcomes

    async def apply_payouts(
        self, db: AsyncSession, wager_id: int, payouts: list[Payout]
    ) -> list[CreditOutcome]:
        outcomes = await self.apply_credits(
            db,
            ((p.user_id, p.payout_amount) for p in payouts),
            TransactionType.PAYOUT,
            reference_id=str(wager_id),
            wager_id=wager_id,
            description=f"Payout for wager {wager_id}",
        )
        applied = sum(1 for o in outcomes if o.outcome == ApplyOutcome.APPLIED)
        logger.info(
            "Payouts applied: wager=%d applied=%d total=%d", wager_id, applied, len(outcomes)
        )
        return outcomes

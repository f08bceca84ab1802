"""WalletApplicationService — thin composition layer.

Combines repository calls with schema transformations. Mutations run inside
unit_of_work (commit on success, rollback and StoreError on store failure).
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_common.database import unit_of_work
from src.vs_common.errors import InvalidAmountError
from src.vs_common.money import VS_TO_USDC_DEN, VS_TO_USDC_NUM, micro_to_display, to_micro
from src.vs_wallet.application.schemas import (
    PurchaseResponse,
    TransactionItem,
    TransactionListResponse,
    WalletResponse,
    cursor_decode,
    cursor_encode,
)
from src.vs_wallet.domain.repository import WalletRepositoryProtocol
from src.vs_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


def usdc_to_vs(usdc_micro: int) -> int:
    """VS received for a USDC spend at the fixed conversion rate, rounded down."""
    return (usdc_micro * VS_TO_USDC_DEN) // VS_TO_USDC_NUM


class WalletApplicationService:
    def __init__(self, repo: WalletRepositoryProtocol | None = None) -> None:
        self._repo: WalletRepositoryProtocol = repo or WalletRepository()

    async def get_wallet(self, db: AsyncSession, user_id: str) -> WalletResponse:
        # First access creates the wallet with zero balances
        async with unit_of_work(db):
            wallet = await self._repo.get_or_create_wallet(db, user_id)
        return WalletResponse.from_domain(wallet)

    async def purchase_vs(
        self, db: AsyncSession, user_id: str, usdc_amount: Decimal
    ) -> PurchaseResponse:
        try:
            usdc_micro = to_micro(usdc_amount)
        except ValueError as e:
            raise InvalidAmountError(str(e)) from None
        if usdc_micro <= 0:
            raise InvalidAmountError("usdc_amount must be positive")
        vs_micro = usdc_to_vs(usdc_micro)

        async with unit_of_work(db):
            wallet, tx = await self._repo.purchase_vs(db, user_id, usdc_micro, vs_micro)
        logger.info(
            "VS purchase: user=%s usdc=%d vs=%d tx=%d", user_id, usdc_micro, vs_micro, tx.id
        )
        return PurchaseResponse(
            wallet=WalletResponse.from_domain(wallet),
            usdc_spent_micro=usdc_micro,
            vs_received_micro=vs_micro,
            vs_received_display=micro_to_display(vs_micro),
            transaction_id=tx.id,
        )

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        tx_type: str | None,
    ) -> TransactionListResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        txs = await self._repo.list_transactions(db, user_id, cursor_id, limit + 1, tx_type)
        has_more = len(txs) > limit
        page = txs[:limit]

        items = [TransactionItem.from_domain(t) for t in page]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return TransactionListResponse(items=items, next_cursor=next_cursor, has_more=has_more)

"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_wallet.domain.models import Transaction, Wallet


class WalletRepositoryProtocol(Protocol):
    async def get_wallet(self, db: AsyncSession, user_id: str) -> Wallet | None: ...

    async def get_or_create_wallet(self, db: AsyncSession, user_id: str) -> Wallet: ...

    async def credit_usdc_once(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        tx_type: str,
        reference_id: str,
        wager_id: int | None,
        description: str,
    ) -> tuple[Wallet, Transaction]: ...

    async def debit_vs_for_prediction(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        wager_id: int,
        side: str,
    ) -> tuple[Wallet, Transaction]: ...

    async def purchase_vs(
        self,
        db: AsyncSession,
        user_id: str,
        usdc_amount: int,
        vs_amount: int,
    ) -> tuple[Wallet, Transaction]: ...

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        tx_type: str | None,
    ) -> list[Transaction]: ...

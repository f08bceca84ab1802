"""WalletRepository — concrete implementation of WalletRepositoryProtocol.

All balance-mutating operations are single atomic UPDATE ... RETURNING
statements; decrements carry their balance condition in the WHERE clause.
A result of 0 rows means the wallet is missing or a constraint was violated.

Transaction ownership: the CALLER commits or rolls back (see
src.vs_common.database.unit_of_work). Each method issues the wallet update and
its ledger insert on the same session so they commit together.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_common.enums import Currency, TransactionStatus, TransactionType
from src.vs_common.errors import (
    AlreadyCreditedError,
    InsufficientBalanceError,
    InternalError,
    WalletNotFoundError,
)
from src.vs_wallet.domain.models import Transaction, Wallet

# ---------------------------------------------------------------------------
# SQL: wallets
# ---------------------------------------------------------------------------

_WALLET_COLUMNS = "id, user_id, vs_amount, usdc_amount, sol_amount, created_at, updated_at"

_GET_WALLET_SQL = text(f"""
    SELECT {_WALLET_COLUMNS}
    FROM wallets
    WHERE user_id = :user_id
""")

_GET_OR_CREATE_WALLET_SQL = text(f"""
    INSERT INTO wallets (user_id)
    VALUES (:user_id)
    ON CONFLICT (user_id) DO UPDATE
        SET updated_at = wallets.updated_at
    RETURNING {_WALLET_COLUMNS}
""")

_CREDIT_USDC_SQL = text(f"""
    UPDATE wallets
    SET usdc_amount = usdc_amount + :amount,
        updated_at = NOW()
    WHERE user_id = :user_id
    RETURNING {_WALLET_COLUMNS}
""")

_DEBIT_VS_SQL = text(f"""
    UPDATE wallets
    SET vs_amount = vs_amount - :amount,
        updated_at = NOW()
    WHERE user_id = :user_id AND vs_amount >= :amount
    RETURNING {_WALLET_COLUMNS}
""")

_PURCHASE_VS_SQL = text(f"""
    UPDATE wallets
    SET usdc_amount = usdc_amount - :usdc_amount,
        vs_amount   = vs_amount   + :vs_amount,
        updated_at = NOW()
    WHERE user_id = :user_id AND usdc_amount >= :usdc_amount
    RETURNING {_WALLET_COLUMNS}
""")

# ---------------------------------------------------------------------------
# SQL: transactions (append-only)
# ---------------------------------------------------------------------------

_TX_COLUMNS = (
    "id, user_id, wallet_id, wager_id, type, currency, amount, vs_amount, "
    "balance_after, side, status, reference_id, description, created_at"
)

_INSERT_TX_SQL = text(f"""
    INSERT INTO transactions
        (user_id, wallet_id, wager_id, type, currency, amount, vs_amount,
         balance_after, side, status, reference_id, description)
    VALUES
        (:user_id, :wallet_id, :wager_id, :type, :currency, :amount, :vs_amount,
         :balance_after, :side, :status, :reference_id, :description)
    RETURNING {_TX_COLUMNS}
""")

# Partial unique index uq_transactions_credit_once makes credits idempotent
_INSERT_CREDIT_ONCE_SQL = text(f"""
    INSERT INTO transactions
        (user_id, wallet_id, wager_id, type, currency, amount, vs_amount,
         balance_after, side, status, reference_id, description)
    VALUES
        (:user_id, :wallet_id, :wager_id, :type, :currency, :amount, 0,
         :balance_after, NULL, :status, :reference_id, :description)
    ON CONFLICT (type, user_id, reference_id)
        WHERE type IN ('payout', 'biweekly_prize')
        DO NOTHING
    RETURNING {_TX_COLUMNS}
""")

_LIST_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
      AND (CAST(:tx_type AS TEXT) IS NULL OR type = CAST(:tx_type AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_wallet(row: object) -> Wallet:
    return Wallet(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        vs_amount=row.vs_amount,  # type: ignore[attr-defined]
        usdc_amount=row.usdc_amount,  # type: ignore[attr-defined]
        sol_amount=row.sol_amount,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_transaction(row: object) -> Transaction:
    return Transaction(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        wallet_id=str(row.wallet_id),  # type: ignore[attr-defined]
        wager_id=row.wager_id,  # type: ignore[attr-defined]
        type=row.type,  # type: ignore[attr-defined]
        currency=row.currency,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        vs_amount=row.vs_amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        side=row.side,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class WalletRepository:
    """Concrete repository — all operations atomic at the SQL level."""

    async def get_wallet(self, db: AsyncSession, user_id: str) -> Wallet | None:
        result = await db.execute(_GET_WALLET_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_wallet(row) if row else None

    async def get_or_create_wallet(self, db: AsyncSession, user_id: str) -> Wallet:
        result = await db.execute(_GET_OR_CREATE_WALLET_SQL, {"user_id": user_id})
        row = result.fetchone()
        if row is None:
            raise InternalError("Wallet upsert returned no rows — this should never happen")
        return _row_to_wallet(row)

    async def credit_usdc_once(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        tx_type: str,
        reference_id: str,
        wager_id: int | None,
        description: str,
    ) -> tuple[Wallet, Transaction]:
        """Increment usdc_amount and append the paired credit row.

        Raises AlreadyCreditedError when the ledger already holds this
        (type, user, reference); the caller's rollback then reverts the
        increment, so a re-run never pays twice.
        """
        result = await db.execute(_CREDIT_USDC_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise WalletNotFoundError(user_id)
        wallet = _row_to_wallet(row)
        tx_result = await db.execute(
            _INSERT_CREDIT_ONCE_SQL,
            {
                "user_id": user_id,
                "wallet_id": wallet.id,
                "wager_id": wager_id,
                "type": tx_type,
                "currency": Currency.USDC,
                "amount": amount,
                "balance_after": wallet.usdc_amount,
                "status": TransactionStatus.COMPLETED,
                "reference_id": reference_id,
                "description": description,
            },
        )
        tx_row = tx_result.fetchone()
        if tx_row is None:
            raise AlreadyCreditedError(tx_type, user_id, reference_id)
        return wallet, _row_to_transaction(tx_row)

    async def debit_vs_for_prediction(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        wager_id: int,
        side: str,
    ) -> tuple[Wallet, Transaction]:
        result = await db.execute(_DEBIT_VS_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            current = await self.get_wallet(db, user_id)
            if current is None:
                raise WalletNotFoundError(user_id)
            raise InsufficientBalanceError(Currency.VS.value, amount, current.vs_amount)
        wallet = _row_to_wallet(row)
        tx_result = await db.execute(
            _INSERT_TX_SQL,
            {
                "user_id": user_id,
                "wallet_id": wallet.id,
                "wager_id": wager_id,
                "type": TransactionType.PREDICTION,
                "currency": Currency.VS,
                "amount": -amount,
                "vs_amount": -amount,
                "balance_after": wallet.vs_amount,
                "side": side,
                "status": TransactionStatus.COMPLETED,
                "reference_id": None,
                "description": f"Prediction on wager {wager_id} ({side})",
            },
        )
        tx_row = tx_result.fetchone()
        if tx_row is None:
            raise InternalError("Ledger insert returned no rows — this should never happen")
        return wallet, _row_to_transaction(tx_row)

    async def purchase_vs(
        self,
        db: AsyncSession,
        user_id: str,
        usdc_amount: int,
        vs_amount: int,
    ) -> tuple[Wallet, Transaction]:
        result = await db.execute(
            _PURCHASE_VS_SQL,
            {"user_id": user_id, "usdc_amount": usdc_amount, "vs_amount": vs_amount},
        )
        row = result.fetchone()
        if row is None:
            current = await self.get_wallet(db, user_id)
            if current is None:
                raise WalletNotFoundError(user_id)
            raise InsufficientBalanceError(Currency.USDC.value, usdc_amount, current.usdc_amount)
        wallet = _row_to_wallet(row)
        tx_result = await db.execute(
            _INSERT_TX_SQL,
            {
                "user_id": user_id,
                "wallet_id": wallet.id,
                "wager_id": None,
                "type": TransactionType.PURCHASE,
                "currency": Currency.USDC,
                "amount": -usdc_amount,
                "vs_amount": vs_amount,
                "balance_after": wallet.usdc_amount,
                "side": None,
                "status": TransactionStatus.COMPLETED,
                "reference_id": None,
                "description": "VS purchase with USDC",
            },
        )
        tx_row = tx_result.fetchone()
        if tx_row is None:
            raise InternalError("Ledger insert returned no rows — this should never happen")
        return wallet, _row_to_transaction(tx_row)

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        tx_type: str | None,
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_TX_SQL,
            {
                "user_id": user_id,
                "cursor_id": cursor_id,
                "tx_type": tx_type,
                "limit": limit,
            },
        )
        rows = result.fetchall()
        return [_row_to_transaction(row) for row in rows]

"""Pydantic schemas and cursor utilities for vs_wallet API."""

import base64
import json
from decimal import Decimal

from pydantic import BaseModel, Field

from src.vs_common.money import micro_to_display
from src.vs_wallet.domain.models import Transaction, Wallet

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PurchaseRequest(BaseModel):
    usdc_amount: Decimal = Field(
        ..., gt=0, max_digits=18, decimal_places=6, description="USDC to spend"
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class WalletResponse(BaseModel):
    user_id: str
    vs_amount_micro: int
    vs_amount_display: str
    usdc_amount_micro: int
    usdc_amount_display: str
    sol_amount_micro: int
    sol_amount_display: str

    @classmethod
    def from_domain(cls, wallet: Wallet) -> "WalletResponse":
        return cls(
            user_id=wallet.user_id,
            vs_amount_micro=wallet.vs_amount,
            vs_amount_display=micro_to_display(wallet.vs_amount),
            usdc_amount_micro=wallet.usdc_amount,
            usdc_amount_display=micro_to_display(wallet.usdc_amount),
            sol_amount_micro=wallet.sol_amount,
            sol_amount_display=micro_to_display(wallet.sol_amount),
        )


class TransactionItem(BaseModel):
    id: int
    type: str
    currency: str
    amount_micro: int
    amount_display: str
    vs_amount_micro: int
    balance_after_micro: int
    balance_after_display: str
    wager_id: int | None
    side: str | None
    status: str
    reference_id: str | None
    description: str | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionItem":
        return cls(
            id=tx.id,
            type=tx.type,
            currency=tx.currency,
            amount_micro=tx.amount,
            amount_display=micro_to_display(tx.amount),
            vs_amount_micro=tx.vs_amount,
            balance_after_micro=tx.balance_after,
            balance_after_display=micro_to_display(tx.balance_after),
            wager_id=tx.wager_id,
            side=tx.side,
            status=tx.status,
            reference_id=tx.reference_id,
            description=tx.description,
            created_at=tx.created_at.isoformat() if tx.created_at else "",
        )


class PurchaseResponse(BaseModel):
    wallet: WalletResponse
    usdc_spent_micro: int
    vs_received_micro: int
    vs_received_display: str
    transaction_id: int


class TransactionListResponse(BaseModel):
    items: list[TransactionItem]
    next_cursor: str | None
    has_more: bool

"""Domain models for vs_wallet — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Wallet:
    id: str
    user_id: str
    vs_amount: int      # micro VS, spendable stake
    usdc_amount: int    # micro USDC, payouts and prizes land here
    sol_amount: int     # micro SOL, informational (synced from chain elsewhere)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Transaction:
    id: int                          # BIGSERIAL
    user_id: str
    wallet_id: str
    type: str                        # TransactionType value
    currency: str                    # Currency value
    amount: int                      # micro, positive=credit negative=debit in `currency`
    vs_amount: int                   # micro, VS delta of the same mutation
    balance_after: int               # micro, `currency` balance snapshot after op
    status: str
    wager_id: int | None = None
    side: str | None = None
    reference_id: str | None = None  # idempotency key for credits
    description: str | None = None
    created_at: datetime | None = None

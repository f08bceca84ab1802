"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class WagerStatus(str, Enum):
    ACTIVE = "active"
    ENDED = "ended"


class WagerSide(str, Enum):
    SIDE1 = "side1"
    SIDE2 = "side2"


class TransactionType(str, Enum):
    PREDICTION = "prediction"
    PAYOUT = "payout"
    PURCHASE = "purchase"
    BIWEEKLY_PRIZE = "biweekly_prize"


class Currency(str, Enum):
    VS = "VS"
    USDC = "USDC"
    SOL = "SOL"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PrizeRunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"


class ApplyOutcome(str, Enum):
    """Per-user result of a payout/prize batch."""
    APPLIED = "applied"
    SKIPPED = "skipped"   # already credited by an earlier run
    FAILED = "failed"

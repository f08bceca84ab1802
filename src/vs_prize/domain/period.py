"""Biweekly prize periods.

Periods are consecutive 14-day windows counted from a fixed anchor instant.
The start is inclusive; the end is the last millisecond of day 14.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from src.vs_common.datetime_utils import ensure_utc
from src.vs_common.errors import InvalidPeriodError

PERIOD_LENGTH = timedelta(days=14)
EARLY_WINDOW = timedelta(hours=24)
_PERIOD_END_OFFSET = PERIOD_LENGTH - timedelta(milliseconds=1)


@dataclass(frozen=True)
class PrizePeriod:
    start: datetime
    end: datetime  # inclusive

    @property
    def key(self) -> str:
        return self.start.isoformat()

    @property
    def early_cutoff(self) -> datetime:
        """Predictions at or before this instant earn the early multiplier."""
        return self.start + EARLY_WINDOW

    @property
    def reference_id(self) -> str:
        """Ledger idempotency key for this period's prize credits."""
        return f"prize:{self.key}"


def current_period(now: datetime, anchor: datetime) -> PrizePeriod:
    now = ensure_utc(now)
    anchor = ensure_utc(anchor)
    index = (now - anchor) // PERIOD_LENGTH
    start = anchor + index * PERIOD_LENGTH
    return PrizePeriod(start=start, end=start + _PERIOD_END_OFFSET)


def resolve_period(
    start: datetime | None,
    end: datetime | None,
    now: datetime,
    anchor: datetime,
) -> PrizePeriod:
    """Explicit bounds when both are given, else the period containing now."""
    if start is None and end is None:
        return current_period(now, anchor)
    if start is None or end is None:
        raise InvalidPeriodError("start and end must be given together")
    start = ensure_utc(start)
    end = ensure_utc(end)
    if start >= end:
        raise InvalidPeriodError("start must be before end")
    return PrizePeriod(start=start, end=end)

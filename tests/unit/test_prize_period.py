"""Unit tests for biweekly period resolution."""

from datetime import UTC, datetime, timedelta

import pytest

from src.vs_common.errors import InvalidPeriodError
from src.vs_prize.domain.period import PrizePeriod, current_period, resolve_period

ANCHOR = datetime(2024, 9, 1, tzinfo=UTC)


class TestCurrentPeriod:
    def test_at_anchor(self) -> None:
        period = current_period(ANCHOR, ANCHOR)
        assert period.start == ANCHOR
        assert period.end == datetime(2024, 9, 14, 23, 59, 59, 999000, tzinfo=UTC)

    def test_second_window(self) -> None:
        period = current_period(ANCHOR + timedelta(days=15, hours=3), ANCHOR)
        assert period.start == datetime(2024, 9, 15, tzinfo=UTC)

    def test_last_millisecond_belongs_to_first_window(self) -> None:
        period = current_period(datetime(2024, 9, 14, 23, 59, 59, 999000, tzinfo=UTC), ANCHOR)
        assert period.start == ANCHOR

    def test_before_anchor_floors_backwards(self) -> None:
        period = current_period(ANCHOR - timedelta(hours=1), ANCHOR)
        assert period.start == ANCHOR - timedelta(days=14)

    def test_naive_now_treated_as_utc(self) -> None:
        period = current_period(datetime(2024, 9, 20), ANCHOR)
        assert period.start == datetime(2024, 9, 15, tzinfo=UTC)


class TestPeriodKeys:
    def test_early_cutoff_is_24h_after_start(self) -> None:
        period = current_period(ANCHOR, ANCHOR)
        assert period.early_cutoff == datetime(2024, 9, 2, tzinfo=UTC)

    def test_reference_id_is_stable(self) -> None:
        period = PrizePeriod(start=ANCHOR, end=ANCHOR + timedelta(days=1))
        assert period.key == "2024-09-01T00:00:00+00:00"
        assert period.reference_id == "prize:2024-09-01T00:00:00+00:00"


class TestResolvePeriod:
    def test_defaults_to_current(self) -> None:
        now = ANCHOR + timedelta(days=30)
        assert resolve_period(None, None, now, ANCHOR) == current_period(now, ANCHOR)

    def test_explicit_bounds(self) -> None:
        start = datetime(2025, 1, 1, tzinfo=UTC)
        end = datetime(2025, 1, 10, tzinfo=UTC)
        period = resolve_period(start, end, ANCHOR, ANCHOR)
        assert (period.start, period.end) == (start, end)

    def test_only_one_bound_rejected(self) -> None:
        with pytest.raises(InvalidPeriodError):
            resolve_period(ANCHOR, None, ANCHOR, ANCHOR)
        with pytest.raises(InvalidPeriodError):
            resolve_period(None, ANCHOR, ANCHOR, ANCHOR)

    def test_start_must_precede_end(self) -> None:
        with pytest.raises(InvalidPeriodError):
            resolve_period(ANCHOR, ANCHOR, ANCHOR, ANCHOR)
        with pytest.raises(InvalidPeriodError):
            resolve_period(ANCHOR + timedelta(days=1), ANCHOR, ANCHOR, ANCHOR)

"""Unit tests for PrizeApplicationService with mock repositories."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.vs_common.errors import (
    AlreadyCreditedError,
    InvalidPeriodError,
    PrizePeriodAlreadyExecutedError,
    StoreError,
    WalletNotFoundError,
)
from src.vs_common.money import MICRO
from src.vs_prize.application.service import PrizeApplicationService
from src.vs_prize.domain.models import PrizeRun
from src.vs_prize.domain.scoring import UserActivity
from src.vs_settlement.application.applier import LedgerApplier

ANCHOR = datetime(2024, 9, 1, tzinfo=UTC)
START = ANCHOR
END = ANCHOR + timedelta(days=14) - timedelta(milliseconds=1)


def _activities() -> list[UserActivity]:
    return [
        UserActivity("alice", 10_000 * MICRO, 5_000 * MICRO, has_early_prediction=False),
        UserActivity("bob", 10_000 * MICRO, 5_000 * MICRO, has_early_prediction=False),
        UserActivity("carol", 30_000 * MICRO, 0, has_early_prediction=True),
    ]


def _run(status: str = "running", end: datetime = END) -> PrizeRun:
    return PrizeRun(period_start=START, period_end=end, pool=75_000, total_points=1, status=status)


def _build() -> tuple[PrizeApplicationService, AsyncMock, AsyncMock]:
    repo = AsyncMock()
    repo.compute_total_spent.return_value = 50_000 * MICRO
    repo.list_user_activity.return_value = _activities()
    wallet_repo = AsyncMock()
    wallet_repo.credit_usdc_once.return_value = (MagicMock(), MagicMock(id=1))
    svc = PrizeApplicationService(repo=repo, applier=LedgerApplier(wallet_repo), anchor=ANCHOR)
    return svc, repo, wallet_repo


class TestPreview:
    async def test_pool_and_shares(self) -> None:
        svc, repo, wallet_repo = _build()

        resp = await svc.preview_period(MagicMock(), START, END)

        assert resp.pool_micro == 75_000
        assert resp.pool_display == "0.075000"
        shares = {u.user_id: u.prize_amount_micro for u in resp.users}
        assert shares == {"alice": 37_500, "bob": 37_500, "carol": 0}
        assert repo.list_user_activity.await_args.args[1:] == (
            START, END, START + timedelta(hours=24),
        )
        wallet_repo.credit_usdc_once.assert_not_awaited()
        repo.claim_run.assert_not_awaited()

    async def test_half_bounds_rejected(self) -> None:
        svc, _, _ = _build()
        with pytest.raises(InvalidPeriodError):
            await svc.preview_period(MagicMock(), START, None)


class TestExecute:
    async def test_pays_users_with_positive_share(self) -> None:
        svc, repo, wallet_repo = _build()
        repo.claim_run.return_value = (_run(), True)
        db = AsyncMock()

        resp = await svc.execute_period(db, START, END)

        paid = [c.args[1:5] for c in wallet_repo.credit_usdc_once.await_args_list]
        ref = "prize:2024-09-01T00:00:00+00:00"
        assert paid == [
            ("alice", 37_500, "biweekly_prize", ref),
            ("bob", 37_500, "biweekly_prize", ref),
        ]
        repo.save_run_items.assert_awaited_once_with(
            db, START, [("alice", 37_500), ("bob", 37_500)]
        )
        repo.complete_run.assert_awaited_once_with(db, START)
        assert resp.completed and not resp.resumed
        assert [a.outcome for a in resp.applied] == ["applied", "applied"]

    async def test_completed_period_is_never_paid_again(self) -> None:
        svc, repo, wallet_repo = _build()
        repo.claim_run.return_value = (_run(status="completed"), False)

        with pytest.raises(PrizePeriodAlreadyExecutedError):
            await svc.execute_period(AsyncMock(), START, END)
        wallet_repo.credit_usdc_once.assert_not_awaited()

    async def test_interrupted_run_resumes_without_double_pay(self) -> None:
        svc, repo, wallet_repo = _build()
        repo.claim_run.return_value = (_run(), False)
        repo.list_run_items.return_value = [("alice", 37_500), ("bob", 37_500)]
        wallet_repo.credit_usdc_once.side_effect = [
            AlreadyCreditedError("biweekly_prize", "alice", "prize:k"),
            (MagicMock(), MagicMock(id=9)),
        ]
        db = AsyncMock()

        resp = await svc.execute_period(db, START, END)

        assert resp.resumed
        assert [a.outcome for a in resp.applied] == ["skipped", "applied"]
        repo.complete_run.assert_awaited_once()

    async def test_conflicting_end_for_same_start(self) -> None:
        svc, repo, wallet_repo = _build()
        repo.claim_run.return_value = (_run(end=END - timedelta(days=1)), False)

        with pytest.raises(InvalidPeriodError):
            await svc.execute_period(AsyncMock(), START, END)
        wallet_repo.credit_usdc_once.assert_not_awaited()

    async def test_failed_credit_leaves_run_open(self) -> None:
        svc, repo, wallet_repo = _build()
        repo.claim_run.return_value = (_run(), True)
        wallet_repo.credit_usdc_once.side_effect = [
            WalletNotFoundError("alice"),
            (MagicMock(), MagicMock(id=2)),
        ]

        resp = await svc.execute_period(AsyncMock(), START, END)

        assert not resp.completed
        repo.complete_run.assert_not_awaited()

    async def test_defaults_to_current_period(self) -> None:
        svc, repo, _ = _build()
        now = datetime.now(UTC)
        repo.claim_run.return_value = (
            PrizeRun(
                period_start=svc.resolve(None, None, now).start,
                period_end=svc.resolve(None, None, now).end,
                pool=0,
                total_points=0,
                status="running",
            ),
            True,
        )

        resp = await svc.execute_period(AsyncMock())

        start = datetime.fromisoformat(resp.period.start)
        assert (start - ANCHOR) % timedelta(days=14) == timedelta(0)


class TestRetryAfterPartialFailure:
    async def test_retry_pays_amounts_frozen_at_claim(self) -> None:
        svc, repo, wallet_repo = _build()
        frozen: dict[datetime, list[tuple[str, int]]] = {}

        async def _save(db: object, start: datetime, credits: list[tuple[str, int]]) -> None:
            frozen[start] = list(credits)

        async def _items(db: object, start: datetime) -> list[tuple[str, int]]:
            return frozen[start]

        repo.save_run_items.side_effect = _save
        repo.list_run_items.side_effect = _items
        repo.claim_run.side_effect = [(_run(), True), (_run(), False)]
        wallet_repo.credit_usdc_once.side_effect = [
            (MagicMock(), MagicMock(id=1)),
            StoreError(),
        ]

        first = await svc.execute_period(AsyncMock(), START, END)
        assert [a.outcome for a in first.applied] == ["applied", "failed"]
        assert not first.completed

        # bob wins a large new stake before the retry; a fresh distribution
        # would now give him more than the remaining pool
        repo.compute_total_spent.return_value = 90_000 * MICRO
        repo.list_user_activity.return_value = [
            UserActivity("alice", 10_000 * MICRO, 5_000 * MICRO, has_early_prediction=False),
            UserActivity("bob", 50_000 * MICRO, 45_000 * MICRO, has_early_prediction=True),
        ]
        wallet_repo.credit_usdc_once.side_effect = [
            AlreadyCreditedError("biweekly_prize", "alice", "prize:k"),
            (MagicMock(), MagicMock(id=2)),
        ]

        second = await svc.execute_period(AsyncMock(), START, END)

        assert second.resumed and second.completed
        assert [(a.user_id, a.prize_amount_micro, a.outcome) for a in second.applied] == [
            ("alice", 37_500, "skipped"),
            ("bob", 37_500, "applied"),
        ]
        assert second.pool_micro == 75_000
        bob_paid = wallet_repo.credit_usdc_once.await_args_list[-1].args[2]
        assert 37_500 + bob_paid <= second.pool_micro

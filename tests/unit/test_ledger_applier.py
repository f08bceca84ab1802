"""Unit tests for LedgerApplier — per-user units of work and outcomes."""

from unittest.mock import AsyncMock, MagicMock

from src.vs_common.enums import ApplyOutcome, TransactionType
from src.vs_common.errors import AlreadyCreditedError, StoreError, WalletNotFoundError
from src.vs_settlement.application.applier import LedgerApplier
from src.vs_settlement.domain.payout import Payout


def _credit_ok(tx_id: int = 1) -> tuple[MagicMock, MagicMock]:
    return MagicMock(), MagicMock(id=tx_id)


class TestApplyCredits:
    async def test_each_credit_commits_separately(self) -> None:
        wallet_repo = AsyncMock()
        wallet_repo.credit_usdc_once.side_effect = [_credit_ok(1), _credit_ok(2)]
        db = AsyncMock()

        outcomes = await LedgerApplier(wallet_repo).apply_credits(
            db, [("a", 10), ("b", 20)], TransactionType.BIWEEKLY_PRIZE, "prize:k", None, "desc"
        )

        assert [o.outcome for o in outcomes] == [ApplyOutcome.APPLIED, ApplyOutcome.APPLIED]
        assert [o.transaction_id for o in outcomes] == [1, 2]
        assert db.commit.await_count == 2

    async def test_already_credited_is_skipped(self) -> None:
        wallet_repo = AsyncMock()
        wallet_repo.credit_usdc_once.side_effect = AlreadyCreditedError("payout", "a", "7")
        db = AsyncMock()

        outcomes = await LedgerApplier(wallet_repo).apply_credits(
            db, [("a", 10)], TransactionType.PAYOUT, "7", 7, "desc"
        )

        assert outcomes[0].outcome == ApplyOutcome.SKIPPED
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_failure_does_not_abort_batch(self) -> None:
        wallet_repo = AsyncMock()
        wallet_repo.credit_usdc_once.side_effect = [
            WalletNotFoundError("a"),
            StoreError(),
            _credit_ok(3),
        ]
        db = AsyncMock()

        outcomes = await LedgerApplier(wallet_repo).apply_credits(
            db, [("a", 1), ("b", 2), ("c", 3)], TransactionType.PAYOUT, "9", 9, "desc"
        )

        assert [o.outcome for o in outcomes] == [
            ApplyOutcome.FAILED, ApplyOutcome.FAILED, ApplyOutcome.APPLIED,
        ]
        assert "Wallet not found" in (outcomes[0].error or "")
        assert db.rollback.await_count == 2

    async def test_non_positive_amounts_are_not_credited(self) -> None:
        wallet_repo = AsyncMock()
        outcomes = await LedgerApplier(wallet_repo).apply_credits(
            AsyncMock(), [("a", 0), ("b", -1)], TransactionType.PAYOUT, "1", 1, "desc"
        )
        assert outcomes == []
        wallet_repo.credit_usdc_once.assert_not_awaited()


class TestApplyPayouts:
    async def test_uses_wager_id_as_reference(self) -> None:
        wallet_repo = AsyncMock()
        wallet_repo.credit_usdc_once.return_value = _credit_ok()
        db = AsyncMock()

        await LedgerApplier(wallet_repo).apply_payouts(
            db, 42, [Payout(user_id="u1", payout_amount=3204, staked_amount=100)]
        )

        wallet_repo.credit_usdc_once.assert_awaited_once_with(
            db, "u1", 3204, "payout", "42", 42, "Payout for wager 42"
        )

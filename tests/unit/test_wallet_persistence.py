"""Unit tests for WalletRepository using a mock AsyncSession."""

from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.vs_common.errors import (
    AlreadyCreditedError,
    InsufficientBalanceError,
    WalletNotFoundError,
)
from src.vs_wallet.infrastructure.persistence import WalletRepository


def _wallet_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", "7b0a4c3e-0000-0000-0000-000000000001")
    row.user_id = kwargs.get("user_id", "u1")
    row.vs_amount = kwargs.get("vs_amount", 0)
    row.usdc_amount = kwargs.get("usdc_amount", 0)
    row.sol_amount = kwargs.get("sol_amount", 0)
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    return row


def _tx_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", 1)
    row.user_id = kwargs.get("user_id", "u1")
    row.wallet_id = kwargs.get("wallet_id", "7b0a4c3e-0000-0000-0000-000000000001")
    row.wager_id = kwargs.get("wager_id")
    row.type = kwargs.get("type", "payout")
    row.currency = kwargs.get("currency", "USDC")
    row.amount = kwargs.get("amount", 3204)
    row.vs_amount = kwargs.get("vs_amount", 0)
    row.balance_after = kwargs.get("balance_after", 3204)
    row.side = kwargs.get("side")
    row.status = kwargs.get("status", "completed")
    row.reference_id = kwargs.get("reference_id", "42")
    row.description = kwargs.get("description")
    row.created_at = datetime.now(UTC)
    return row


def _result(row: MagicMock | None) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = row
    return result


class TestCreditUsdcOnce:
    async def test_increments_and_records(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [
            _result(_wallet_row(usdc_amount=3204)),
            _result(_tx_row(wager_id=42)),
        ]

        wallet, tx = await WalletRepository().credit_usdc_once(
            db, "u1", 3204, "payout", "42", 42, "Payout for wager 42"
        )

        assert wallet.usdc_amount == 3204
        assert tx.reference_id == "42"
        insert_params = db.execute.await_args_list[1].args[1]
        assert insert_params["balance_after"] == 3204
        assert insert_params["reference_id"] == "42"

    async def test_duplicate_credit_raises(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [_result(_wallet_row()), _result(None)]

        with pytest.raises(AlreadyCreditedError):
            await WalletRepository().credit_usdc_once(
                db, "u1", 3204, "payout", "42", 42, "Payout for wager 42"
            )

    async def test_missing_wallet(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(None)

        with pytest.raises(WalletNotFoundError):
            await WalletRepository().credit_usdc_once(
                db, "ghost", 1, "biweekly_prize", "prize:k", None, "prize"
            )
        assert db.execute.await_count == 1


class TestDebitVsForPrediction:
    async def test_records_negative_stake(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [
            _result(_wallet_row(vs_amount=900)),
            _result(_tx_row(type="prediction", currency="VS", amount=-100, side="side1")),
        ]

        _, tx = await WalletRepository().debit_vs_for_prediction(db, "u1", 100, 1, "side1")

        params = db.execute.await_args_list[1].args[1]
        assert params["amount"] == -100
        assert params["vs_amount"] == -100
        assert params["side"] == "side1"
        assert params["balance_after"] == 900
        assert tx.amount == -100

    async def test_insufficient_balance_reports_available(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [_result(None), _result(_wallet_row(vs_amount=40))]

        with pytest.raises(InsufficientBalanceError) as exc_info:
            await WalletRepository().debit_vs_for_prediction(db, "u1", 100, 1, "side1")
        assert "available 40" in exc_info.value.message

    async def test_missing_wallet(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(None)
        with pytest.raises(WalletNotFoundError):
            await WalletRepository().debit_vs_for_prediction(db, "u1", 100, 1, "side1")

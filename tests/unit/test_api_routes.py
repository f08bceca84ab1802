"""Router tests through the ASGI app: auth, envelope and error mapping."""

from collections.abc import Callable
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from src.vs_common.errors import NotWagerCreatorError, WagerNotActiveError
from src.vs_wager.application.lifecycle import SettlementResult
from src.vs_wager.application.schemas import SweepResponse, WagerListResponse, WagerResponse
from src.vs_wager.domain.models import Wager


def _wager() -> Wager:
    return Wager(
        id=1,
        name="Derby",
        description=None,
        category="sports",
        side1="Home",
        side2="Away",
        image_url=None,
        is_public=True,
        side1_amount=1_000_000_000,
        side2_amount=800_000_000,
        wager_status="ended",
        winning_side="side1",
        wager_end_time=datetime(2024, 9, 3, tzinfo=UTC),
        created_by_id="creator",
    )


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_wallet_requires_token(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/wallet")
    assert resp.status_code == 401


async def test_bad_token_rejected(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/wallet", headers=_auth("not-a-jwt"))
    assert resp.status_code == 401


async def test_get_wager_envelope(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    service = AsyncMock()
    service.get_wager.return_value = WagerResponse.from_domain(_wager())
    monkeypatch.setattr("src.vs_wager.api.router._service", service)

    resp = await client.get("/api/v1/wagers/1")

    body = resp.json()
    assert resp.status_code == 200
    assert body["code"] == 0
    assert body["data"]["winning_side"] == "side1"
    assert body["request_id"].startswith("req_")
    assert resp.headers["X-Request-ID"] == body["request_id"]


async def test_settle_maps_app_error(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch, make_token: Callable[..., str]
) -> None:
    service = AsyncMock()
    service.settle_wager.side_effect = NotWagerCreatorError(1)
    monkeypatch.setattr("src.vs_wager.api.router._service", service)

    resp = await client.put(
        "/api/v1/wagers/1/settle", json={"winning_side": "side1"}, headers=_auth(make_token("u9"))
    )

    assert resp.status_code == 403
    assert resp.json()["code"] == 3005
    assert resp.json()["data"] is None
    service.settle_wager.assert_awaited_once()
    assert service.settle_wager.await_args.args[1:] == (1, "side1", "u9")


async def test_settle_without_body_uses_default(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch, make_token: Callable[..., str]
) -> None:
    service = AsyncMock()
    service.settle_wager.return_value = SettlementResult(wager=_wager())
    monkeypatch.setattr("src.vs_wager.api.router._service", service)

    resp = await client.put("/api/v1/wagers/1/settle", headers=_auth(make_token("creator")))

    assert resp.status_code == 200
    assert service.settle_wager.await_args.args[2] is None
    assert resp.json()["data"]["total_payout_micro"] == 0


async def test_predict_on_closed_wager(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch, make_token: Callable[..., str]
) -> None:
    service = AsyncMock()
    service.place_prediction.side_effect = WagerNotActiveError(1)
    monkeypatch.setattr("src.vs_wager.api.router._service", service)

    resp = await client.post(
        "/api/v1/wagers/1/predict",
        json={"side": "side1", "amount": "10"},
        headers=_auth(make_token()),
    )

    assert resp.status_code == 422
    assert resp.json()["code"] == 3002


async def test_prize_execute_requires_admin(
    client: AsyncClient, make_token: Callable[..., str]
) -> None:
    resp = await client.post("/api/v1/prize/execute", headers=_auth(make_token("u1")))
    assert resp.status_code == 403
    assert resp.json()["code"] == 1006


async def test_admin_expire_sweep(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch, make_token: Callable[..., str]
) -> None:
    service = AsyncMock()
    service.expire_wagers.return_value = SweepResponse(settled=[])
    monkeypatch.setattr("src.vs_admin.api.router._service", service)

    resp = await client.post(
        "/api/v1/admin/wagers/expire", headers=_auth(make_token(sub=None, role="admin"))
    )

    assert resp.status_code == 200
    assert resp.json()["data"] == {"settled": []}


async def test_purchase_validates_body(
    client: AsyncClient, make_token: Callable[..., str]
) -> None:
    resp = await client.post(
        "/api/v1/wallet/purchase", json={"usdc_amount": "-1"}, headers=_auth(make_token())
    )
    assert resp.status_code == 422


async def test_list_wagers_defaults_to_active(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    service = AsyncMock()
    service.list_wagers.return_value = WagerListResponse(items=[])
    monkeypatch.setattr("src.vs_wager.api.router._service", service)

    resp = await client.get("/api/v1/wagers")
    assert resp.status_code == 200
    assert service.list_wagers.await_args.args[1] == "active"

    await client.get("/api/v1/wagers", params={"status": "ended"})
    assert service.list_wagers.await_args.args[1] == "ended"

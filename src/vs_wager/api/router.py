"""vs_wager REST endpoints.

POST /wagers                    — create (auth)
GET  /wagers                    — list, active only unless status is given
GET  /wagers/{wager_id}         — detail (expiry sweep first)
PUT  /wagers/{wager_id}/settle  — creator settles; winning_side optional
POST /wagers/{wager_id}/predict — stake VS on a side (auth)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_common.database import get_db_session
from src.vs_common.enums import WagerStatus
from src.vs_common.response import ApiResponse, success_response
from src.vs_gateway.auth.dependencies import get_current_user_id
from src.vs_wager.application.schemas import (
    CreateWagerRequest,
    PredictionRequest,
    SettlementResponse,
    SettleWagerRequest,
)
from src.vs_wager.application.service import WagerApplicationService

router = APIRouter(prefix="/wagers", tags=["wagers"])

_service = WagerApplicationService()


@router.post("", status_code=201)
async def create_wager(
    body: CreateWagerRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_wager(db, user_id, body)
    return success_response(data.model_dump(), request)


@router.get("")
async def list_wagers(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: WagerStatus = Query(WagerStatus.ACTIVE),
    category: str | None = Query(None),
    is_public: bool | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    data = await _service.list_wagers(
        db, status.value, category, is_public, limit
    )
    return success_response(data.model_dump(), request)


@router.get("/{wager_id}")
async def get_wager(
    wager_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.get_wager(db, wager_id)
    return success_response(data.model_dump(), request)


@router.put("/{wager_id}/settle")
async def settle_wager(
    wager_id: int,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    body: SettleWagerRequest | None = None,
) -> ApiResponse:
    winning_side = body.winning_side if body else None
    result = await _service.settle_wager(db, wager_id, winning_side, user_id)
    return success_response(SettlementResponse.from_result(result).model_dump(), request)


@router.post("/{wager_id}/predict")
async def place_prediction(
    wager_id: int,
    body: PredictionRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.place_prediction(db, wager_id, user_id, body.side, body.amount)
    return success_response(data.model_dump(), request)

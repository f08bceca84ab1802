"""vs_prize REST endpoints.

GET  /prize/preview  — pool and per-user shares, no mutation
POST /prize/execute  — pay the period (admin)
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_common.database import get_db_session
from src.vs_common.response import ApiResponse, success_response
from src.vs_gateway.auth.dependencies import Principal, require_admin
from src.vs_prize.application.schemas import ExecutePeriodRequest
from src.vs_prize.application.service import PrizeApplicationService

router = APIRouter(prefix="/prize", tags=["prize"])

_service = PrizeApplicationService()


@router.get("/preview")
async def preview_period(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    start: datetime | None = Query(None, description="Period start (ISO 8601)"),
    end: datetime | None = Query(None, description="Period end (ISO 8601, inclusive)"),
) -> ApiResponse:
    data = await _service.preview_period(db, start, end)
    return success_response(data.model_dump(), request)


@router.post("/execute")
async def execute_period(
    request: Request,
    admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    body: ExecutePeriodRequest | None = None,
) -> ApiResponse:
    start = body.start if body else None
    end = body.end if body else None
    data = await _service.execute_period(db, start, end)
    return success_response(data.model_dump(), request)

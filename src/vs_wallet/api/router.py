"""vs_wallet REST API — 3 endpoints, all require a bearer token."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_common.database import get_db_session
from src.vs_common.enums import TransactionType
from src.vs_common.response import ApiResponse, success_response
from src.vs_gateway.auth.dependencies import get_current_user_id
from src.vs_wallet.application.schemas import PurchaseRequest
from src.vs_wallet.application.service import WalletApplicationService

router = APIRouter(prefix="/wallet", tags=["wallet"])

_service = WalletApplicationService()


@router.get("")
async def get_wallet(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_wallet(db, user_id)
    return success_response(data.model_dump(), request)


@router.post("/purchase")
async def purchase_vs(
    body: PurchaseRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.purchase_vs(db, user_id, body.usdc_amount)
    return success_response(data.model_dump(), request)


@router.get("/transactions")
async def list_transactions(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(50, ge=1, le=100, description="Items per page"),
    type: TransactionType | None = Query(None, description="Filter by transaction type"),  # noqa: A002
) -> ApiResponse:
    data = await _service.list_transactions(
        db, user_id, cursor, limit, type.value if type else None
    )
    return success_response(data.model_dump(), request)

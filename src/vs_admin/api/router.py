"""Admin REST API. Every route requires an admin token."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_admin.application.service import AdminService
from src.vs_common.database import get_db_session
from src.vs_common.response import ApiResponse, success_response
from src.vs_gateway.auth.dependencies import Principal, require_admin

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


@router.post("/wagers/expire")
async def expire_wagers(
    request: Request,
    admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.expire_wagers(db)
    return success_response(data.model_dump(), request)


@router.get("/invariants")
async def verify_invariants(
    request: Request,
    admin: Annotated[Principal, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.verify_all_invariants(db)
    return success_response(result, request)

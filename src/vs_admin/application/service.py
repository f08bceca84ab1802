"""Admin application service: manual expiry sweep and ledger audit."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.vs_settlement.domain.global_invariants import (
    verify_payout_bounds,
    verify_vs_conservation,
)
from src.vs_wager.application.lifecycle import WagerLifecycleManager
from src.vs_wager.application.schemas import SettlementResponse, SweepResponse


class AdminService:
    def __init__(self, lifecycle: WagerLifecycleManager | None = None) -> None:
        self._lifecycle = lifecycle or WagerLifecycleManager()

    async def expire_wagers(self, db: AsyncSession) -> SweepResponse:
        results = await self._lifecycle.detect_and_settle_expired(db)
        return SweepResponse(settled=[SettlementResponse.from_result(r) for r in results])

    async def verify_all_invariants(self, db: AsyncSession) -> dict[str, Any]:
        violations = await verify_vs_conservation(db)
        violations.extend(await verify_payout_bounds(db))
        return {"ok": len(violations) == 0, "violations": violations}

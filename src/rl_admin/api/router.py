# src/rl_admin/api/router.py
"""Admin REST API — ledger integrity check."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.database import get_db_session
from src.rl_common.response import ApiResponse, respond
from src.rl_gateway.dependencies import get_ledger_service
from src.rl_ledger.application.schemas import InvariantReport
from src.rl_ledger.application.service import LedgerApplicationService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/invariants")
async def check_invariants(
    request: Request,
    service: Annotated[LedgerApplicationService, Depends(get_ledger_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    violations = await service.verify_invariants(db)
    return respond(request, InvariantReport(ok=not violations, violations=violations))

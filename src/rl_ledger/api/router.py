"""rl_ledger REST endpoints.

GET  /ledger                                        — snapshot (optional week_start)
POST /ledger/actions                                — named action, returns fresh snapshot
GET  /ledger/companions/{companion_id}              — one companion's ledger
GET  /ledger/companions/{companion_id}/balance      — balance folded from payments
GET  /ledger/companions/{companion_id}/weekly-charge — Mon-Fri charge for a week
"""

import datetime
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.cents import cents_to_display
from src.rl_common.database import get_db_session
from src.rl_common.response import ApiResponse, respond
from src.rl_gateway.dependencies import get_dispatcher, get_ledger_service
from src.rl_ledger.application.dispatcher import LedgerDispatcher
from src.rl_ledger.application.schemas import (
    BalanceResponse,
    CompanionLedgerItem,
    LedgerAction,
    LedgerSnapshotResponse,
    WeeklyChargeResponse,
)
from src.rl_ledger.application.service import LedgerApplicationService
from src.rl_ledger.domain.calculations import week_bounds

router = APIRouter(prefix="/ledger", tags=["ledger"])

Service = Annotated[LedgerApplicationService, Depends(get_ledger_service)]
Dispatcher = Annotated[LedgerDispatcher, Depends(get_dispatcher)]
Db = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("")
async def get_snapshot(
    request: Request,
    service: Service,
    db: Db,
    week_start: datetime.date | None = Query(
        None, description="Any day of the week to compute weekly charges for"
    ),
) -> ApiResponse:
    snapshot = await service.get_ledger_snapshot(db, week_start)
    return respond(request, LedgerSnapshotResponse.from_domain(snapshot))


@router.post("/actions")
async def run_action(
    body: Annotated[LedgerAction, Body(discriminator="action")],
    request: Request,
    dispatcher: Dispatcher,
    db: Db,
) -> ApiResponse:
    snapshot = await dispatcher.dispatch(db, body)
    return respond(request, LedgerSnapshotResponse.from_domain(snapshot))


@router.get("/companions/{companion_id}")
async def get_companion_ledger(
    companion_id: str,
    request: Request,
    service: Service,
    db: Db,
    week_start: datetime.date | None = Query(None),
) -> ApiResponse:
    ledger = await service.get_companion_ledger(db, companion_id, week_start)
    return respond(request, CompanionLedgerItem.from_domain(ledger))


@router.get("/companions/{companion_id}/balance")
async def get_balance(
    companion_id: str, request: Request, service: Service, db: Db
) -> ApiResponse:
    balance = await service.compute_balance(db, companion_id)
    return respond(request, BalanceResponse.from_cents(companion_id, balance))


@router.get("/companions/{companion_id}/weekly-charge")
async def get_weekly_charge(
    companion_id: str,
    request: Request,
    service: Service,
    db: Db,
    week_start: datetime.date = Query(..., description="Any day of the target week"),
) -> ApiResponse:
    charge = await service.compute_weekly_charge(db, companion_id, week_start)
    monday, friday = week_bounds(week_start)
    data = WeeklyChargeResponse(
        companion_id=companion_id,
        week_start=monday,
        week_end=friday,
        weekly_charge_cents=charge,
        weekly_charge_display=cents_to_display(charge),
    )
    return respond(request, data)

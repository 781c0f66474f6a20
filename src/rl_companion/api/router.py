"""rl_companion REST endpoints.

GET    /companions                  — list the directory
POST   /companions                  — add (id derived from the name)
PATCH  /companions/{companion_id}   — rename (id stays)
DELETE /companions/{companion_id}   — delete with its trips and payments
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.database import get_db_session
from src.rl_common.response import ApiResponse, respond
from src.rl_companion.application.schemas import (
    AddCompanionRequest,
    CompanionItem,
    CompanionListResponse,
    RenameCompanionRequest,
)
from src.rl_companion.application.service import CompanionApplicationService
from src.rl_gateway.dependencies import get_companion_service

router = APIRouter(prefix="/companions", tags=["companions"])

Service = Annotated[CompanionApplicationService, Depends(get_companion_service)]
Db = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("")
async def list_companions(request: Request, service: Service, db: Db) -> ApiResponse:
    companions = await service.list_companions(db)
    data = CompanionListResponse(
        items=[CompanionItem.from_domain(c) for c in companions],
        total=len(companions),
    )
    return respond(request, data)


@router.post("", status_code=201)
async def add_companion(
    body: AddCompanionRequest, request: Request, service: Service, db: Db
) -> ApiResponse:
    companion = await service.add_companion(db, body.name)
    return respond(request, CompanionItem.from_domain(companion))


@router.patch("/{companion_id}")
async def rename_companion(
    companion_id: str,
    body: RenameCompanionRequest,
    request: Request,
    service: Service,
    db: Db,
) -> ApiResponse:
    companion = await service.rename_companion(db, companion_id, body.name)
    return respond(request, CompanionItem.from_domain(companion))


@router.delete("/{companion_id}")
async def delete_companion(
    companion_id: str, request: Request, service: Service, db: Db
) -> ApiResponse:
    await service.delete_companion(db, companion_id)
    return respond(request, {"deleted": companion_id})

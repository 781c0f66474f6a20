"""Action dispatcher — maps a named action onto a ledger or directory operation.

Each action runs as its own unit of work; the ledger is then re-read and the
fresh snapshot is returned, so callers always see post-write state.
"""

import logging
from typing import Any

import pydantic
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.errors import ValidationError
from src.rl_companion.application.service import CompanionApplicationService
from src.rl_ledger.application.schemas import (
    LEDGER_ACTION_ADAPTER,
    AddCompanionAction,
    AddPaymentAction,
    DeleteCompanionAction,
    DeletePaymentAction,
    EditPaymentAction,
    LedgerAction,
    RenameCompanionAction,
    SetWeekTripsAction,
    TransferPaymentAction,
    UpsertTripAction,
)
from src.rl_ledger.application.service import LedgerApplicationService
from src.rl_ledger.domain.models import LedgerSnapshot

logger = logging.getLogger(__name__)


def parse_action(payload: dict[str, Any]) -> LedgerAction:
    """Validate a raw action payload; unknown actions and bad fields raise ValidationError."""
    try:
        return LEDGER_ACTION_ADAPTER.validate_python(payload)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(p) for p in first["loc"]) or "body"
        raise ValidationError(f"{where}: {first['msg']}") from None


class LedgerDispatcher:
    def __init__(
        self,
        ledger: LedgerApplicationService,
        companions: CompanionApplicationService,
    ) -> None:
        self._ledger = ledger
        self._companions = companions

    async def dispatch_payload(
        self, db: AsyncSession, payload: dict[str, Any]
    ) -> LedgerSnapshot:
        return await self.dispatch(db, parse_action(payload))

    async def dispatch(self, db: AsyncSession, action: LedgerAction) -> LedgerSnapshot:
        logger.debug("Dispatching action %s", action.action)
        if isinstance(action, UpsertTripAction):
            await self._ledger.upsert_trip(
                db, action.companion_id, action.trip_date,
                action.outbound, action.return_leg,
            )
        elif isinstance(action, SetWeekTripsAction):
            await self._ledger.set_week_trips(
                db,
                action.companion_id,
                {day: (legs.outbound, legs.return_leg) for day, legs in action.days.items()},
            )
        elif isinstance(action, AddPaymentAction):
            await self._ledger.add_payment(
                db, action.companion_id, action.amount, action.paid_at, action.note
            )
        elif isinstance(action, EditPaymentAction):
            await self._ledger.edit_payment(
                db, action.payment_id,
                amount=action.amount, paid_at=action.paid_at, note=action.note,
            )
        elif isinstance(action, DeletePaymentAction):
            await self._ledger.delete_payment(db, action.payment_id)
        elif isinstance(action, TransferPaymentAction):
            await self._ledger.transfer_payment(db, action.payment_id, action.new_companion_id)
        elif isinstance(action, AddCompanionAction):
            await self._companions.add_companion(db, action.name)
        elif isinstance(action, RenameCompanionAction):
            await self._companions.rename_companion(db, action.companion_id, action.name)
        elif isinstance(action, DeleteCompanionAction):
            await self._companions.delete_companion(db, action.companion_id)
        else:
            raise ValidationError(f"unknown action: {action.action}")
        return await self._ledger.get_ledger_snapshot(db)

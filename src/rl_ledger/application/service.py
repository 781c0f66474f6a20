"""LedgerApplicationService — trips, payments and derived balances.

Every mutation validates its input before touching storage, then runs as one
unit of work via `async with atomic(db)`. Balances are folded from the payment
set on each read; nothing is updated by delta arithmetic.

Concurrent writers are last-write-wins at field level: there is no version
column on payments or trips.
"""

import logging
import uuid
from collections.abc import Callable, Mapping
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.cents import parse_amount_cents
from src.rl_common.database import atomic, reading
from src.rl_common.datetime_utils import parse_day, parse_timestamp, utc_now
from src.rl_common.errors import (
    CompanionNotFoundError,
    PaymentNotFoundError,
    ValidationError,
)
from src.rl_companion.domain.models import Companion
from src.rl_companion.domain.repository import CompanionRepositoryProtocol
from src.rl_companion.infrastructure.persistence import CompanionRepository
from src.rl_ledger.domain.calculations import (
    compute_balance,
    compute_total_charge,
    compute_weekly_charge,
    week_bounds,
)
from src.rl_ledger.domain.invariants import verify_ledger_invariants
from src.rl_ledger.domain.models import CompanionLedger, LedgerSnapshot, Payment, Trip
from src.rl_ledger.domain.repository import LedgerRepositoryProtocol
from src.rl_ledger.infrastructure.persistence import LedgerRepository

logger = logging.getLogger(__name__)

DEFAULT_LEG_COST_CENTS = 150
MAX_NOTE_LENGTH = 500


def _new_payment_id() -> str:
    return uuid.uuid4().hex


def _check_flag(value: object, field: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be a boolean")
    return value


def _check_note(note: object) -> str | None:
    if note is None:
        return None
    if not isinstance(note, str):
        raise ValidationError("note must be a string")
    if len(note) > MAX_NOTE_LENGTH:
        raise ValidationError(f"note must be at most {MAX_NOTE_LENGTH} characters")
    return note


class LedgerApplicationService:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol | None = None,
        companion_repo: CompanionRepositoryProtocol | None = None,
        leg_cost_cents: int = DEFAULT_LEG_COST_CENTS,
        id_factory: Callable[[], str] = _new_payment_id,
    ) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()
        self._companions: CompanionRepositoryProtocol = companion_repo or CompanionRepository()
        self._leg_cost = leg_cost_cents
        self._new_id = id_factory

    @property
    def leg_cost_cents(self) -> int:
        return self._leg_cost

    async def _require_companion(self, db: AsyncSession, companion_id: str) -> Companion:
        companion = await self._companions.get_companion(db, companion_id)
        if companion is None:
            raise CompanionNotFoundError(companion_id)
        return companion

    async def _require_payment(self, db: AsyncSession, payment_id: str) -> Payment:
        payment = await self._repo.get_payment(db, payment_id)
        if payment is None:
            raise PaymentNotFoundError(payment_id)
        return payment

    # ------------------------------------------------------------------
    # Trips
    # ------------------------------------------------------------------

    async def upsert_trip(
        self,
        db: AsyncSession,
        companion_id: str,
        trip_date: date | str,
        outbound: bool,
        return_leg: bool,
    ) -> Trip:
        day = parse_day(trip_date, "trip_date")
        outbound = _check_flag(outbound, "outbound")
        return_leg = _check_flag(return_leg, "return_leg")
        async with atomic(db):
            await self._require_companion(db, companion_id)
            trip = await self._repo.upsert_trip(db, companion_id, day, outbound, return_leg)
        logger.info(
            "Trip upserted: companion=%s date=%s outbound=%s return=%s",
            companion_id, day.isoformat(), outbound, return_leg,
        )
        return trip

    async def set_week_trips(
        self,
        db: AsyncSession,
        companion_id: str,
        days: Mapping[date | str, tuple[bool, bool]],
    ) -> list[Trip]:
        """Upsert several days for one companion in a single transaction."""
        parsed = [
            (
                parse_day(day, "trip_date"),
                _check_flag(legs[0], "outbound"),
                _check_flag(legs[1], "return_leg"),
            )
            for day, legs in days.items()
        ]
        async with atomic(db):
            await self._require_companion(db, companion_id)
            trips = [
                await self._repo.upsert_trip(db, companion_id, day, outbound, return_leg)
                for day, outbound, return_leg in sorted(parsed)
            ]
        logger.info("Trips upserted: companion=%s days=%d", companion_id, len(trips))
        return trips

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    async def add_payment(
        self,
        db: AsyncSession,
        companion_id: str,
        amount: object,
        paid_at: object = None,
        note: str | None = None,
    ) -> Payment:
        amount_cents = parse_amount_cents(amount)
        when = utc_now() if paid_at is None else parse_timestamp(paid_at, "paid_at")
        note = _check_note(note)
        async with atomic(db):
            await self._require_companion(db, companion_id)
            payment = await self._repo.insert_payment(
                db,
                Payment(
                    id=self._new_id(),
                    companion_id=companion_id,
                    amount_cents=amount_cents,
                    paid_at=when,
                    note=note,
                ),
            )
        logger.info(
            "Payment added: id=%s companion=%s amount=%d",
            payment.id, companion_id, amount_cents,
        )
        return payment

    async def edit_payment(
        self,
        db: AsyncSession,
        payment_id: str,
        amount: object = None,
        paid_at: object = None,
        note: str | None = None,
    ) -> Payment:
        """Change only the supplied fields. The owner is never touched here."""
        amount_cents = None if amount is None else parse_amount_cents(amount)
        when = None if paid_at is None else parse_timestamp(paid_at, "paid_at")
        note = _check_note(note)
        async with atomic(db):
            await self._require_payment(db, payment_id)
            payment = await self._repo.update_payment(db, payment_id, amount_cents, when, note)
            if payment is None:
                raise PaymentNotFoundError(payment_id)
        logger.info("Payment edited: id=%s owner=%s", payment_id, payment.companion_id)
        return payment

    async def delete_payment(self, db: AsyncSession, payment_id: str) -> None:
        async with atomic(db):
            payment = await self._require_payment(db, payment_id)
            if not await self._repo.delete_payment(db, payment_id):
                raise PaymentNotFoundError(payment_id)
        logger.info(
            "Payment deleted: id=%s owner=%s amount=%d",
            payment_id, payment.companion_id, payment.amount_cents,
        )

    async def transfer_payment(
        self, db: AsyncSession, payment_id: str, new_companion_id: str
    ) -> Payment:
        """Reassign ownership in place: same id, amount, date and note."""
        async with atomic(db):
            payment = await self._require_payment(db, payment_id)
            await self._require_companion(db, new_companion_id)
            if payment.companion_id == new_companion_id:
                return payment
            moved = await self._repo.reassign_payment(db, payment_id, new_companion_id)
            if moved is None:
                raise PaymentNotFoundError(payment_id)
        logger.info(
            "Payment transferred: id=%s %s -> %s amount=%d",
            payment_id, payment.companion_id, new_companion_id, payment.amount_cents,
        )
        return moved

    # ------------------------------------------------------------------
    # Derived figures
    # ------------------------------------------------------------------

    async def compute_balance(self, db: AsyncSession, companion_id: str) -> int:
        async with reading(db):
            await self._require_companion(db, companion_id)
            payments = await self._repo.list_payments(db, companion_id)
        return compute_balance(payments)

    async def compute_weekly_charge(
        self, db: AsyncSession, companion_id: str, week_start: date | str
    ) -> int:
        day = parse_day(week_start, "week_start")
        async with reading(db):
            await self._require_companion(db, companion_id)
            trips = await self._repo.list_trips(db, companion_id)
        return compute_weekly_charge(trips, day, self._leg_cost)

    async def _companion_ledger(
        self, db: AsyncSession, companion: Companion, week_start: date | None
    ) -> CompanionLedger:
        trips = await self._repo.list_trips(db, companion.id)
        payments = await self._repo.list_payments(db, companion.id)
        return CompanionLedger(
            companion_id=companion.id,
            name=companion.name,
            trips=trips,
            payments=payments,
            balance=compute_balance(payments),
            total_charge=compute_total_charge(trips, self._leg_cost),
            weekly_charge=(
                compute_weekly_charge(trips, week_start, self._leg_cost)
                if week_start is not None
                else None
            ),
        )

    async def get_companion_ledger(
        self, db: AsyncSession, companion_id: str, week_start: date | str | None = None
    ) -> CompanionLedger:
        day = None if week_start is None else parse_day(week_start, "week_start")
        async with reading(db):
            companion = await self._require_companion(db, companion_id)
            return await self._companion_ledger(db, companion, day)

    async def get_ledger_snapshot(
        self, db: AsyncSession, week_start: date | str | None = None
    ) -> LedgerSnapshot:
        day = None if week_start is None else parse_day(week_start, "week_start")
        async with reading(db):
            companions = await self._companions.list_companions(db)
            ledgers = [await self._companion_ledger(db, c, day) for c in companions]
        return LedgerSnapshot(
            companions=ledgers,
            leg_cost=self._leg_cost,
            week_start=week_bounds(day)[0] if day is not None else None,
        )

    async def verify_invariants(self, db: AsyncSession) -> list[str]:
        async with reading(db):
            return await verify_ledger_invariants(self._repo, db)

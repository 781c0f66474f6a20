"""Pydantic schemas for the rl_ledger API.

Amounts travel as `*_cents` integers with a `*_display` string alongside.
Requests accept decimal amounts (10, "10.50", -2.5); the service parses them to cents.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter

from src.rl_common.cents import cents_to_display
from src.rl_ledger.domain.models import CompanionLedger, LedgerSnapshot, Payment, Trip

# ---------------------------------------------------------------------------
# Action requests (POST /ledger/actions), discriminated by "action"
# ---------------------------------------------------------------------------


class UpsertTripAction(BaseModel):
    action: Literal["upsert_trip"]
    companion_id: str
    trip_date: date
    outbound: bool = False
    return_leg: bool = Field(False, alias="return")

    model_config = {"populate_by_name": True}


class DayLegs(BaseModel):
    outbound: bool = False
    return_leg: bool = Field(False, alias="return")

    model_config = {"populate_by_name": True}


class SetWeekTripsAction(BaseModel):
    action: Literal["set_week_trips"]
    companion_id: str
    days: dict[date, DayLegs]


class AddPaymentAction(BaseModel):
    action: Literal["add_payment"]
    companion_id: str
    amount: Decimal | str
    paid_at: datetime | None = None
    note: str | None = Field(None, max_length=500)


class EditPaymentAction(BaseModel):
    action: Literal["edit_payment"]
    payment_id: str
    amount: Decimal | str | None = None
    paid_at: datetime | None = None
    note: str | None = Field(None, max_length=500)


class DeletePaymentAction(BaseModel):
    action: Literal["delete_payment"]
    payment_id: str


class TransferPaymentAction(BaseModel):
    action: Literal["transfer_payment"]
    payment_id: str
    new_companion_id: str


class AddCompanionAction(BaseModel):
    action: Literal["add_companion"]
    name: str


class RenameCompanionAction(BaseModel):
    action: Literal["rename_companion"]
    companion_id: str
    name: str


class DeleteCompanionAction(BaseModel):
    action: Literal["delete_companion"]
    companion_id: str


LedgerAction = (
    UpsertTripAction
    | SetWeekTripsAction
    | AddPaymentAction
    | EditPaymentAction
    | DeletePaymentAction
    | TransferPaymentAction
    | AddCompanionAction
    | RenameCompanionAction
    | DeleteCompanionAction
)

LEDGER_ACTION_ADAPTER: TypeAdapter[LedgerAction] = TypeAdapter(
    Annotated[LedgerAction, Field(discriminator="action")]
)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TripItem(BaseModel):
    trip_date: date
    outbound: bool
    return_leg: bool
    legs: int

    @classmethod
    def from_domain(cls, trip: Trip) -> "TripItem":
        return cls(
            trip_date=trip.trip_date,
            outbound=trip.outbound,
            return_leg=trip.return_leg,
            legs=trip.legs,
        )


class PaymentItem(BaseModel):
    id: str
    companion_id: str
    amount_cents: int
    amount_display: str
    paid_at: str  # ISO8601 string
    note: str | None

    @classmethod
    def from_domain(cls, payment: Payment) -> "PaymentItem":
        return cls(
            id=payment.id,
            companion_id=payment.companion_id,
            amount_cents=payment.amount_cents,
            amount_display=cents_to_display(payment.amount_cents),
            paid_at=payment.paid_at.isoformat(),
            note=payment.note,
        )


class CompanionLedgerItem(BaseModel):
    id: str
    name: str
    trips: list[TripItem]
    payments: list[PaymentItem]
    balance_cents: int
    balance_display: str
    total_charge_cents: int
    total_charge_display: str
    debt_cents: int
    debt_display: str
    weekly_charge_cents: int | None = None
    weekly_charge_display: str | None = None

    @classmethod
    def from_domain(cls, ledger: CompanionLedger) -> "CompanionLedgerItem":
        weekly = ledger.weekly_charge
        return cls(
            id=ledger.companion_id,
            name=ledger.name,
            trips=[TripItem.from_domain(t) for t in ledger.trips],
            payments=[PaymentItem.from_domain(p) for p in ledger.payments],
            balance_cents=ledger.balance,
            balance_display=cents_to_display(ledger.balance),
            total_charge_cents=ledger.total_charge,
            total_charge_display=cents_to_display(ledger.total_charge),
            debt_cents=ledger.debt,
            debt_display=cents_to_display(ledger.debt),
            weekly_charge_cents=weekly,
            weekly_charge_display=cents_to_display(weekly) if weekly is not None else None,
        )


class LedgerSnapshotResponse(BaseModel):
    companions: list[CompanionLedgerItem]
    leg_cost_cents: int
    leg_cost_display: str
    week_start: date | None

    @classmethod
    def from_domain(cls, snapshot: LedgerSnapshot) -> "LedgerSnapshotResponse":
        return cls(
            companions=[CompanionLedgerItem.from_domain(c) for c in snapshot.companions],
            leg_cost_cents=snapshot.leg_cost,
            leg_cost_display=cents_to_display(snapshot.leg_cost),
            week_start=snapshot.week_start,
        )


class BalanceResponse(BaseModel):
    companion_id: str
    balance_cents: int
    balance_display: str

    @classmethod
    def from_cents(cls, companion_id: str, balance: int) -> "BalanceResponse":
        return cls(
            companion_id=companion_id,
            balance_cents=balance,
            balance_display=cents_to_display(balance),
        )


class WeeklyChargeResponse(BaseModel):
    companion_id: str
    week_start: date
    week_end: date
    weekly_charge_cents: int
    weekly_charge_display: str


class InvariantReport(BaseModel):
    ok: bool
    violations: list[str]

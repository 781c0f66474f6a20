"""Domain models for rl_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class Trip:
    """One calendar day of travel for one companion. Unique per (companion_id, trip_date)."""

    companion_id: str
    trip_date: date
    outbound: bool = False
    return_leg: bool = False

    @property
    def legs(self) -> int:
        return int(self.outbound) + int(self.return_leg)


@dataclass
class Payment:
    id: str                  # stable across edit and transfer
    companion_id: str        # current owner, changes only on transfer
    amount_cents: int        # signed: positive = credited to the owner
    paid_at: datetime
    note: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class CompanionLedger:
    """Read model: one companion with its records and derived figures (all cents)."""

    companion_id: str
    name: str
    trips: list[Trip]
    payments: list[Payment]
    balance: int
    total_charge: int
    weekly_charge: int | None = None

    @property
    def debt(self) -> int:
        # Negative debt: the companion is owed money
        return self.total_charge - self.balance


@dataclass
class LedgerSnapshot:
    companions: list[CompanionLedger]
    leg_cost: int
    week_start: date | None = None

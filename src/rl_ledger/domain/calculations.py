"""Pure balance and travel-charge calculations.

Balances are never stored: they are folded from the payment set on every read.
Only Monday-Friday trips are chargeable; weekend records contribute 0 everywhere.
"""

from collections.abc import Iterable
from datetime import date, timedelta

from src.rl_ledger.domain.models import Payment, Trip

BUSINESS_DAYS = 5


def compute_balance(payments: Iterable[Payment]) -> int:
    return sum(p.amount_cents for p in payments)


def is_business_day(day: date) -> bool:
    return day.weekday() < BUSINESS_DAYS


def trip_charge(trip: Trip, leg_cost: int) -> int:
    if not is_business_day(trip.trip_date):
        return 0
    return leg_cost * trip.legs


def week_bounds(day: date) -> tuple[date, date]:
    """Monday and Friday of the week containing `day`."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=BUSINESS_DAYS - 1)


def compute_weekly_charge(trips: Iterable[Trip], week_start: date, leg_cost: int) -> int:
    monday, friday = week_bounds(week_start)
    return sum(
        trip_charge(t, leg_cost) for t in trips if monday <= t.trip_date <= friday
    )


def compute_total_charge(trips: Iterable[Trip], leg_cost: int) -> int:
    return sum(trip_charge(t, leg_cost) for t in trips)


def compute_debt(total_charge: int, balance: int) -> int:
    return total_charge - balance

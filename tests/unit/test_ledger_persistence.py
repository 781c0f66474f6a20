# tests/unit/test_ledger_persistence.py
"""Unit tests for LedgerRepository using MagicMock AsyncSession."""
from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.rl_common.errors import InternalError
from src.rl_ledger.domain.models import Payment
from src.rl_ledger.infrastructure.persistence import LedgerRepository


def _make_trip_row(**kwargs):
    row = MagicMock()
    row.companion_id = kwargs.get("companion_id", "MOI")
    row.trip_date = kwargs.get("trip_date", date(2026, 10, 19))
    row.outbound = kwargs.get("outbound", True)
    row.return_leg = kwargs.get("return_leg", False)
    return row


def _make_payment_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", "pay-1")
    row.companion_id = kwargs.get("companion_id", "MOI")
    row.amount_cents = kwargs.get("amount_cents", 1000)
    row.paid_at = kwargs.get("paid_at", datetime(2026, 10, 19, 8, tzinfo=UTC))
    row.note = kwargs.get("note")
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    return row


def _result(one=None, rows=None, rowcount=0):
    result = MagicMock()
    result.fetchone.return_value = one
    result.fetchall.return_value = rows or []
    result.rowcount = rowcount
    return result


@pytest.fixture
def db():
    return MagicMock()


class TestTrips:
    @pytest.mark.asyncio
    async def test_upsert_passes_both_flags(self, db):
        db.execute = AsyncMock(return_value=_result(one=_make_trip_row(return_leg=True)))

        trip = await LedgerRepository().upsert_trip(db, "MOI", date(2026, 10, 19), True, True)

        params = db.execute.call_args[0][1]
        assert params == {
            "companion_id": "MOI",
            "trip_date": date(2026, 10, 19),
            "outbound": True,
            "return_leg": True,
        }
        assert "ON CONFLICT (companion_id, trip_date)" in str(db.execute.call_args[0][0])
        assert trip.legs == 2

    @pytest.mark.asyncio
    async def test_upsert_without_returning_row_raises(self, db):
        db.execute = AsyncMock(return_value=_result(one=None))
        with pytest.raises(InternalError):
            await LedgerRepository().upsert_trip(db, "MOI", date(2026, 10, 19), True, True)

    @pytest.mark.asyncio
    async def test_list_trips_maps_rows(self, db):
        rows = [_make_trip_row(trip_date=date(2026, 10, d)) for d in (19, 20)]
        db.execute = AsyncMock(return_value=_result(rows=rows))

        trips = await LedgerRepository().list_trips(db, "MOI")

        assert [t.trip_date.day for t in trips] == [19, 20]

    @pytest.mark.asyncio
    async def test_delete_for_companion_returns_rowcount(self, db):
        db.execute = AsyncMock(return_value=_result(rowcount=3))
        assert await LedgerRepository().delete_trips_for_companion(db, "MOI") == 3


class TestPayments:
    @pytest.mark.asyncio
    async def test_insert_maps_returned_row(self, db):
        db.execute = AsyncMock(return_value=_result(one=_make_payment_row(note="peaje")))
        payment = Payment(
            id="pay-1",
            companion_id="MOI",
            amount_cents=1000,
            paid_at=datetime(2026, 10, 19, 8, tzinfo=UTC),
            note="peaje",
        )

        stored = await LedgerRepository().insert_payment(db, payment)

        assert stored.id == "pay-1"
        assert stored.note == "peaje"
        assert stored.created_at is not None

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, db):
        db.execute = AsyncMock(return_value=_result(one=None))
        assert await LedgerRepository().get_payment(db, "nope") is None

    @pytest.mark.asyncio
    async def test_update_passes_none_for_unchanged_fields(self, db):
        db.execute = AsyncMock(return_value=_result(one=_make_payment_row(amount_cents=500)))

        updated = await LedgerRepository().update_payment(db, "pay-1", 500, None, None)

        params = db.execute.call_args[0][1]
        assert params["amount_cents"] == 500
        assert params["paid_at"] is None
        assert params["note"] is None
        assert updated is not None
        assert updated.amount_cents == 500

    @pytest.mark.asyncio
    async def test_reassign_is_single_update(self, db):
        db.execute = AsyncMock(
            return_value=_result(one=_make_payment_row(companion_id="JOSEMI"))
        )

        moved = await LedgerRepository().reassign_payment(db, "pay-1", "JOSEMI")

        assert db.execute.await_count == 1
        sql = str(db.execute.call_args[0][0])
        assert sql.strip().startswith("UPDATE payments")
        assert moved is not None
        assert moved.id == "pay-1"
        assert moved.companion_id == "JOSEMI"

    @pytest.mark.asyncio
    async def test_delete_reports_whether_row_existed(self, db):
        db.execute = AsyncMock(return_value=_result(one=None))
        assert await LedgerRepository().delete_payment(db, "nope") is False

    @pytest.mark.asyncio
    async def test_delete_for_companion_returns_rowcount(self, db):
        db.execute = AsyncMock(return_value=_result(rowcount=2))
        assert await LedgerRepository().delete_payments_for_companion(db, "MOI") == 2


@pytest.mark.asyncio
async def test_count_orphans(db):
    trips, payments = MagicMock(), MagicMock()
    trips.scalar_one.return_value = 0
    payments.scalar_one.return_value = 4
    db.execute = AsyncMock(side_effect=[trips, payments])

    assert await LedgerRepository().count_orphans(db) == (0, 4)

"""LedgerRepository — concrete implementation of LedgerRepositoryProtocol.

Trips and payments each live in one table keyed by a stable id:
  - trips:    PRIMARY KEY (companion_id, trip_date), written with ON CONFLICT upsert
  - payments: PRIMARY KEY id; transfer only rewrites companion_id in place

Transaction ownership: The CALLER (application service) starts and commits
the transaction via `async with atomic(db)`.
asyncpg NULL parameter pattern: CAST(:param AS TYPE) is required for None values.
"""

from datetime import date, datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.errors import InternalError
from src.rl_ledger.domain.models import Payment, Trip

# ---------------------------------------------------------------------------
# SQL: trips
# ---------------------------------------------------------------------------

_LIST_TRIPS_SQL = text("""
    SELECT companion_id, trip_date, outbound, return_leg
    FROM trips
    WHERE companion_id = :companion_id
    ORDER BY trip_date
""")

_UPSERT_TRIP_SQL = text("""
    INSERT INTO trips (companion_id, trip_date, outbound, return_leg)
    VALUES (:companion_id, :trip_date, :outbound, :return_leg)
    ON CONFLICT (companion_id, trip_date) DO UPDATE
        SET outbound   = EXCLUDED.outbound,
            return_leg = EXCLUDED.return_leg,
            updated_at = NOW()
    RETURNING companion_id, trip_date, outbound, return_leg
""")

_DELETE_TRIPS_SQL = text("""
    DELETE FROM trips
    WHERE companion_id = :companion_id
""")

# ---------------------------------------------------------------------------
# SQL: payments
# ---------------------------------------------------------------------------

_PAYMENT_COLUMNS = "id, companion_id, amount_cents, paid_at, note, created_at, updated_at"

_LIST_PAYMENTS_SQL = text(f"""
    SELECT {_PAYMENT_COLUMNS}
    FROM payments
    WHERE companion_id = :companion_id
    ORDER BY paid_at, id
""")

_GET_PAYMENT_SQL = text(f"""
    SELECT {_PAYMENT_COLUMNS}
    FROM payments
    WHERE id = :payment_id
""")

_INSERT_PAYMENT_SQL = text(f"""
    INSERT INTO payments (id, companion_id, amount_cents, paid_at, note)
    VALUES (:id, :companion_id, :amount_cents, :paid_at, :note)
    RETURNING {_PAYMENT_COLUMNS}
""")

_UPDATE_PAYMENT_SQL = text(f"""
    UPDATE payments
    SET amount_cents = COALESCE(CAST(:amount_cents AS BIGINT), amount_cents),
        paid_at      = COALESCE(CAST(:paid_at AS TIMESTAMPTZ), paid_at),
        note         = COALESCE(CAST(:note AS TEXT), note),
        updated_at   = NOW()
    WHERE id = :payment_id
    RETURNING {_PAYMENT_COLUMNS}
""")

_REASSIGN_PAYMENT_SQL = text(f"""
    UPDATE payments
    SET companion_id = :new_companion_id,
        updated_at   = NOW()
    WHERE id = :payment_id
    RETURNING {_PAYMENT_COLUMNS}
""")

_DELETE_PAYMENT_SQL = text("""
    DELETE FROM payments
    WHERE id = :payment_id
    RETURNING id
""")

_DELETE_PAYMENTS_FOR_COMPANION_SQL = text("""
    DELETE FROM payments
    WHERE companion_id = :companion_id
""")

# ---------------------------------------------------------------------------
# SQL: integrity
# ---------------------------------------------------------------------------

_ORPHAN_TRIPS_SQL = text("""
    SELECT COUNT(*)
    FROM trips t
    LEFT JOIN companions c ON c.id = t.companion_id
    WHERE c.id IS NULL
""")

_ORPHAN_PAYMENTS_SQL = text("""
    SELECT COUNT(*)
    FROM payments p
    LEFT JOIN companions c ON c.id = p.companion_id
    WHERE c.id IS NULL
""")


def _row_to_trip(row: object) -> Trip:
    return Trip(
        companion_id=row.companion_id,  # type: ignore[attr-defined]
        trip_date=row.trip_date,  # type: ignore[attr-defined]
        outbound=row.outbound,  # type: ignore[attr-defined]
        return_leg=row.return_leg,  # type: ignore[attr-defined]
    )


def _row_to_payment(row: object) -> Payment:
    return Payment(
        id=row.id,  # type: ignore[attr-defined]
        companion_id=row.companion_id,  # type: ignore[attr-defined]
        amount_cents=row.amount_cents,  # type: ignore[attr-defined]
        paid_at=row.paid_at,  # type: ignore[attr-defined]
        note=row.note,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class LedgerRepository:
    """Concrete repository — every mutation is a single SQL statement."""

    async def list_trips(self, db: AsyncSession, companion_id: str) -> list[Trip]:
        result = await db.execute(_LIST_TRIPS_SQL, {"companion_id": companion_id})
        return [_row_to_trip(row) for row in result.fetchall()]

    async def upsert_trip(
        self,
        db: AsyncSession,
        companion_id: str,
        trip_date: date,
        outbound: bool,
        return_leg: bool,
    ) -> Trip:
        result = await db.execute(
            _UPSERT_TRIP_SQL,
            {
                "companion_id": companion_id,
                "trip_date": trip_date,
                "outbound": outbound,
                "return_leg": return_leg,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Trip upsert returned no rows")
        return _row_to_trip(row)

    async def delete_trips_for_companion(
        self, db: AsyncSession, companion_id: str
    ) -> int:
        result = await db.execute(_DELETE_TRIPS_SQL, {"companion_id": companion_id})
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    async def list_payments(
        self, db: AsyncSession, companion_id: str
    ) -> list[Payment]:
        result = await db.execute(_LIST_PAYMENTS_SQL, {"companion_id": companion_id})
        return [_row_to_payment(row) for row in result.fetchall()]

    async def get_payment(self, db: AsyncSession, payment_id: str) -> Payment | None:
        result = await db.execute(_GET_PAYMENT_SQL, {"payment_id": payment_id})
        row = result.fetchone()
        return _row_to_payment(row) if row else None

    async def insert_payment(self, db: AsyncSession, payment: Payment) -> Payment:
        result = await db.execute(
            _INSERT_PAYMENT_SQL,
            {
                "id": payment.id,
                "companion_id": payment.companion_id,
                "amount_cents": payment.amount_cents,
                "paid_at": payment.paid_at,
                "note": payment.note,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Payment insert returned no rows")
        return _row_to_payment(row)

    async def update_payment(
        self,
        db: AsyncSession,
        payment_id: str,
        amount_cents: int | None,
        paid_at: datetime | None,
        note: str | None,
    ) -> Payment | None:
        # None means "leave unchanged" for every field
        result = await db.execute(
            _UPDATE_PAYMENT_SQL,
            {
                "payment_id": payment_id,
                "amount_cents": amount_cents,
                "paid_at": paid_at,
                "note": note,
            },
        )
        row = result.fetchone()
        return _row_to_payment(row) if row else None

    async def delete_payment(self, db: AsyncSession, payment_id: str) -> bool:
        result = await db.execute(_DELETE_PAYMENT_SQL, {"payment_id": payment_id})
        return result.fetchone() is not None

    async def reassign_payment(
        self, db: AsyncSession, payment_id: str, new_companion_id: str
    ) -> Payment | None:
        result = await db.execute(
            _REASSIGN_PAYMENT_SQL,
            {"payment_id": payment_id, "new_companion_id": new_companion_id},
        )
        row = result.fetchone()
        return _row_to_payment(row) if row else None

    async def delete_payments_for_companion(
        self, db: AsyncSession, companion_id: str
    ) -> int:
        result = await db.execute(
            _DELETE_PAYMENTS_FOR_COMPANION_SQL, {"companion_id": companion_id}
        )
        return result.rowcount  # type: ignore[attr-defined, no-any-return]

    async def count_orphans(self, db: AsyncSession) -> tuple[int, int]:
        trips = (await db.execute(_ORPHAN_TRIPS_SQL)).scalar_one()
        payments = (await db.execute(_ORPHAN_PAYMENTS_SQL)).scalar_one()
        return trips, payments

# src/rl_ledger/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.

Transaction ownership: the application service wraps calls in
`async with atomic(db)`; repositories never commit.
"""

from datetime import date, datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_ledger.domain.models import Payment, Trip


class LedgerRepositoryProtocol(Protocol):
    # --- trips ---

    async def list_trips(self, db: AsyncSession, companion_id: str) -> list[Trip]: ...

    async def upsert_trip(
        self,
        db: AsyncSession,
        companion_id: str,
        trip_date: date,
        outbound: bool,
        return_leg: bool,
    ) -> Trip: ...

    async def delete_trips_for_companion(
        self, db: AsyncSession, companion_id: str
    ) -> int: ...

    # --- payments ---

    async def list_payments(
        self, db: AsyncSession, companion_id: str
    ) -> list[Payment]: ...

    async def get_payment(self, db: AsyncSession, payment_id: str) -> Payment | None: ...

    async def insert_payment(self, db: AsyncSession, payment: Payment) -> Payment: ...

    async def update_payment(
        self,
        db: AsyncSession,
        payment_id: str,
        amount_cents: int | None,
        paid_at: datetime | None,
        note: str | None,
    ) -> Payment | None: ...

    async def delete_payment(self, db: AsyncSession, payment_id: str) -> bool: ...

    async def reassign_payment(
        self, db: AsyncSession, payment_id: str, new_companion_id: str
    ) -> Payment | None: ...

    async def delete_payments_for_companion(
        self, db: AsyncSession, companion_id: str
    ) -> int: ...

    # --- integrity ---

    async def count_orphans(self, db: AsyncSession) -> tuple[int, int]:
        """(orphan_trips, orphan_payments): rows whose companion no longer exists."""
        ...

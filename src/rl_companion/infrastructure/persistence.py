"""CompanionRepository — concrete implementation of CompanionRepositoryProtocol.

All queries use raw text() SQL (no ORM). The unique index on LOWER(name)
is the final guard behind the service-level uniqueness check.
"""

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.errors import (
    CompanionIdExistsError,
    CompanionNameExistsError,
    InternalError,
)
from src.rl_companion.domain.models import Companion

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_LIST_COMPANIONS_SQL = text("""
    SELECT id, name, created_at
    FROM companions
    ORDER BY created_at, id
""")

_GET_COMPANION_SQL = text("""
    SELECT id, name, created_at
    FROM companions
    WHERE id = :companion_id
""")

_INSERT_COMPANION_SQL = text("""
    INSERT INTO companions (id, name)
    VALUES (:companion_id, :name)
    RETURNING id, name, created_at
""")

_UPDATE_NAME_SQL = text("""
    UPDATE companions
    SET name = :name
    WHERE id = :companion_id
    RETURNING id, name, created_at
""")

_DELETE_COMPANION_SQL = text("""
    DELETE FROM companions
    WHERE id = :companion_id
    RETURNING id
""")


def _raise_conflict(exc: IntegrityError, companion_id: str, name: str) -> None:
    """Translate a lost race on the unique constraints into the matching conflict."""
    detail = str(exc.orig)
    if "uq_companions_name_lower" in detail:
        raise CompanionNameExistsError(name) from exc
    if "companions_pkey" in detail:
        raise CompanionIdExistsError(companion_id) from exc


def _row_to_companion(row: object) -> Companion:
    return Companion(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class CompanionRepository:
    """Concrete repository — callers own the transaction."""

    async def list_companions(self, db: AsyncSession) -> list[Companion]:
        result = await db.execute(_LIST_COMPANIONS_SQL)
        return [_row_to_companion(row) for row in result.fetchall()]

    async def get_companion(
        self, db: AsyncSession, companion_id: str
    ) -> Companion | None:
        result = await db.execute(_GET_COMPANION_SQL, {"companion_id": companion_id})
        row = result.fetchone()
        return _row_to_companion(row) if row else None

    async def insert_companion(
        self, db: AsyncSession, companion_id: str, name: str
    ) -> Companion:
        try:
            result = await db.execute(
                _INSERT_COMPANION_SQL, {"companion_id": companion_id, "name": name}
            )
        except IntegrityError as exc:
            _raise_conflict(exc, companion_id, name)
            raise
        row = result.fetchone()
        if row is None:
            raise InternalError("Companion insert returned no rows")
        return _row_to_companion(row)

    async def update_companion_name(
        self, db: AsyncSession, companion_id: str, name: str
    ) -> Companion | None:
        try:
            result = await db.execute(
                _UPDATE_NAME_SQL, {"companion_id": companion_id, "name": name}
            )
        except IntegrityError as exc:
            _raise_conflict(exc, companion_id, name)
            raise
        row = result.fetchone()
        return _row_to_companion(row) if row else None

    async def delete_companion(self, db: AsyncSession, companion_id: str) -> bool:
        result = await db.execute(_DELETE_COMPANION_SQL, {"companion_id": companion_id})
        return result.fetchone() is not None

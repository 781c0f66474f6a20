"""CompanionApplicationService — the companion directory.

Mutations run inside `async with atomic(db)`; a failure at any step rolls the
whole operation back. Deletion cascades dependents before the parent row so no
trip or payment ever points at a missing companion.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.database import atomic, reading
from src.rl_common.errors import (
    CompanionIdExistsError,
    CompanionNameExistsError,
    CompanionNotFoundError,
)
from src.rl_companion.domain.models import (
    Companion,
    derive_companion_id,
    name_key,
    normalize_name,
)
from src.rl_companion.domain.repository import CompanionRepositoryProtocol
from src.rl_companion.infrastructure.persistence import CompanionRepository
from src.rl_ledger.domain.repository import LedgerRepositoryProtocol
from src.rl_ledger.infrastructure.persistence import LedgerRepository

logger = logging.getLogger(__name__)


def _ensure_name_free(
    companions: list[Companion], name: str, exclude_id: str | None = None
) -> None:
    key = name_key(name)
    for c in companions:
        if c.id != exclude_id and name_key(c.name) == key:
            raise CompanionNameExistsError(name)


class CompanionApplicationService:
    def __init__(
        self,
        repo: CompanionRepositoryProtocol | None = None,
        ledger_repo: LedgerRepositoryProtocol | None = None,
    ) -> None:
        self._repo: CompanionRepositoryProtocol = repo or CompanionRepository()
        self._ledger_repo: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()

    async def list_companions(self, db: AsyncSession) -> list[Companion]:
        async with reading(db):
            return await self._repo.list_companions(db)

    async def get_companion(self, db: AsyncSession, companion_id: str) -> Companion:
        async with reading(db):
            companion = await self._repo.get_companion(db, companion_id)
        if companion is None:
            raise CompanionNotFoundError(companion_id)
        return companion

    async def add_companion(self, db: AsyncSession, name: str) -> Companion:
        name = normalize_name(name)
        companion_id = derive_companion_id(name)
        async with atomic(db):
            existing = await self._repo.list_companions(db)
            _ensure_name_free(existing, name)
            # Distinct names can still derive the same id ("Ana Maria" vs "Ana  Maria")
            if any(c.id == companion_id for c in existing):
                raise CompanionIdExistsError(companion_id)
            companion = await self._repo.insert_companion(db, companion_id, name)
        logger.info("Companion added: id=%s name=%r", companion.id, companion.name)
        return companion

    async def rename_companion(
        self, db: AsyncSession, companion_id: str, new_name: str
    ) -> Companion:
        new_name = normalize_name(new_name)
        async with atomic(db):
            existing = await self._repo.list_companions(db)
            if not any(c.id == companion_id for c in existing):
                raise CompanionNotFoundError(companion_id)
            _ensure_name_free(existing, new_name, exclude_id=companion_id)
            companion = await self._repo.update_companion_name(db, companion_id, new_name)
            if companion is None:
                raise CompanionNotFoundError(companion_id)
        logger.info("Companion renamed: id=%s name=%r", companion_id, new_name)
        return companion

    async def delete_companion(self, db: AsyncSession, companion_id: str) -> None:
        async with atomic(db):
            if await self._repo.get_companion(db, companion_id) is None:
                raise CompanionNotFoundError(companion_id)
            # Dependents first, parent last
            trips = await self._ledger_repo.delete_trips_for_companion(db, companion_id)
            payments = await self._ledger_repo.delete_payments_for_companion(db, companion_id)
            await self._repo.delete_companion(db, companion_id)
        logger.info(
            "Companion deleted: id=%s trips=%d payments=%d", companion_id, trips, payments
        )

    async def bootstrap_defaults(
        self, db: AsyncSession, names: list[str]
    ) -> list[Companion]:
        """Seed `names` into an empty directory. A populated directory is left alone."""
        created: list[Companion] = []
        async with atomic(db):
            if await self._repo.list_companions(db):
                return created
            for raw in names:
                name = normalize_name(raw)
                _ensure_name_free(created, name)
                companion_id = derive_companion_id(name)
                if any(c.id == companion_id for c in created):
                    raise CompanionIdExistsError(companion_id)
                created.append(await self._repo.insert_companion(db, companion_id, name))
        if created:
            logger.info("Seeded default companions: %s", ", ".join(c.id for c in created))
        return created

# src/rl_companion/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_companion.domain.models import Companion


class CompanionRepositoryProtocol(Protocol):
    async def list_companions(self, db: AsyncSession) -> list[Companion]: ...

    async def get_companion(
        self, db: AsyncSession, companion_id: str
    ) -> Companion | None: ...

    async def insert_companion(
        self, db: AsyncSession, companion_id: str, name: str
    ) -> Companion: ...

    async def update_companion_name(
        self, db: AsyncSession, companion_id: str, name: str
    ) -> Companion | None: ...

    async def delete_companion(self, db: AsyncSession, companion_id: str) -> bool: ...

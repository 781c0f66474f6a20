"""Unit tests for the atomic/reading unit-of-work helpers."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.rl_common.database import atomic, reading
from src.rl_common.errors import CompanionNotFoundError, StorageError


def _session() -> AsyncMock:
    return AsyncMock()


class TestAtomic:
    async def test_commits_on_success(self) -> None:
        db = _session()
        async with atomic(db):
            pass
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()

    async def test_sqlalchemy_error_becomes_storage_error(self) -> None:
        db = _session()
        with pytest.raises(StorageError) as exc_info:
            async with atomic(db):
                raise IntegrityError("INSERT", {}, Exception("duplicate key"))
        assert exc_info.value.http_status == 503
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_domain_error_passes_through_after_rollback(self) -> None:
        db = _session()
        with pytest.raises(CompanionNotFoundError):
            async with atomic(db):
                raise CompanionNotFoundError("MOI")
        db.rollback.assert_awaited_once()

    async def test_failed_commit_is_rolled_back(self) -> None:
        db = _session()
        db.commit.side_effect = IntegrityError("COMMIT", {}, Exception("fk violation"))
        with pytest.raises(StorageError):
            async with atomic(db):
                pass
        db.rollback.assert_awaited_once()


class TestReading:
    async def test_never_commits(self) -> None:
        db = _session()
        async with reading(db):
            pass
        db.commit.assert_not_awaited()

    async def test_wraps_sqlalchemy_errors(self) -> None:
        db = _session()
        with pytest.raises(StorageError):
            async with reading(db):
                raise IntegrityError("SELECT", {}, Exception("boom"))

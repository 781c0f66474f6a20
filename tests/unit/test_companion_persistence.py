# tests/unit/test_companion_persistence.py
"""Unit tests for CompanionRepository using MagicMock AsyncSession."""
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.rl_common.errors import (
    CompanionIdExistsError,
    CompanionNameExistsError,
    InternalError,
)
from src.rl_companion.infrastructure.persistence import CompanionRepository


def _make_companion_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", "MOI")
    row.name = kwargs.get("name", "Moi")
    row.created_at = datetime.now(UTC)
    return row


@pytest.fixture
def db():
    return MagicMock()


@pytest.mark.asyncio
async def test_list_companions(db):
    result_mock = MagicMock()
    result_mock.fetchall.return_value = [
        _make_companion_row(),
        _make_companion_row(id="JOSEMI", name="Josemi"),
    ]
    db.execute = AsyncMock(return_value=result_mock)

    companions = await CompanionRepository().list_companions(db)

    assert [c.id for c in companions] == ["MOI", "JOSEMI"]


@pytest.mark.asyncio
async def test_get_companion_not_found(db):
    result_mock = MagicMock()
    result_mock.fetchone.return_value = None
    db.execute = AsyncMock(return_value=result_mock)

    assert await CompanionRepository().get_companion(db, "ANA") is None


@pytest.mark.asyncio
async def test_insert_companion(db):
    result_mock = MagicMock()
    result_mock.fetchone.return_value = _make_companion_row(id="ANA_MARIA", name="Ana Maria")
    db.execute = AsyncMock(return_value=result_mock)

    companion = await CompanionRepository().insert_companion(db, "ANA_MARIA", "Ana Maria")

    assert db.execute.call_args[0][1] == {"companion_id": "ANA_MARIA", "name": "Ana Maria"}
    assert companion.name == "Ana Maria"


@pytest.mark.asyncio
async def test_insert_without_row_raises(db):
    result_mock = MagicMock()
    result_mock.fetchone.return_value = None
    db.execute = AsyncMock(return_value=result_mock)

    with pytest.raises(InternalError):
        await CompanionRepository().insert_companion(db, "MOI", "Moi")


@pytest.mark.asyncio
async def test_insert_losing_name_race_is_conflict(db):
    db.execute = AsyncMock(side_effect=IntegrityError(
        "INSERT INTO companions", {},
        Exception('duplicate key value violates unique constraint "uq_companions_name_lower"'),
    ))

    with pytest.raises(CompanionNameExistsError):
        await CompanionRepository().insert_companion(db, "MOI", "Moi")


@pytest.mark.asyncio
async def test_insert_losing_id_race_is_conflict(db):
    db.execute = AsyncMock(side_effect=IntegrityError(
        "INSERT INTO companions", {},
        Exception('duplicate key value violates unique constraint "companions_pkey"'),
    ))

    with pytest.raises(CompanionIdExistsError):
        await CompanionRepository().insert_companion(db, "MOI", "Moi")


@pytest.mark.asyncio
async def test_rename_losing_name_race_is_conflict(db):
    db.execute = AsyncMock(side_effect=IntegrityError(
        "UPDATE companions", {},
        Exception('duplicate key value violates unique constraint "uq_companions_name_lower"'),
    ))

    with pytest.raises(CompanionNameExistsError):
        await CompanionRepository().update_companion_name(db, "JOSEMI", "Moi")


@pytest.mark.asyncio
async def test_other_integrity_errors_propagate(db):
    db.execute = AsyncMock(side_effect=IntegrityError(
        "INSERT INTO companions", {},
        Exception('new row violates check constraint "ck_companions_name_not_blank"'),
    ))

    with pytest.raises(IntegrityError):
        await CompanionRepository().insert_companion(db, "MOI", " ")


@pytest.mark.asyncio
async def test_rename_keeps_id(db):
    result_mock = MagicMock()
    result_mock.fetchone.return_value = _make_companion_row(name="Moisés")
    db.execute = AsyncMock(return_value=result_mock)

    companion = await CompanionRepository().update_companion_name(db, "MOI", "Moisés")

    assert companion is not None
    assert companion.id == "MOI"
    assert companion.name == "Moisés"


@pytest.mark.asyncio
async def test_delete_reports_result(db):
    result_mock = MagicMock()
    result_mock.fetchone.return_value = MagicMock(id="MOI")
    db.execute = AsyncMock(return_value=result_mock)

    assert await CompanionRepository().delete_companion(db, "MOI") is True

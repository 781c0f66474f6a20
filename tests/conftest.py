"""Shared test fixtures.

Services are wired to the in-memory repositories from tests/fakes.py; the
HTTP client runs the real FastAPI app with the DB session dependency overridden.
"""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from src.main import create_app
from src.rl_common.database import get_db_session
from src.rl_companion.application.service import CompanionApplicationService
from src.rl_ledger.application.dispatcher import LedgerDispatcher
from src.rl_ledger.application.service import LedgerApplicationService
from tests.fakes import (
    FakeCompanionRepository,
    FakeLedgerRepository,
    FakeSession,
    InMemoryStore,
)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def db(store: InMemoryStore) -> FakeSession:
    return FakeSession(store)


@pytest.fixture
def ledger_repo(store: InMemoryStore) -> FakeLedgerRepository:
    return FakeLedgerRepository(store)


@pytest.fixture
def companion_repo(store: InMemoryStore) -> FakeCompanionRepository:
    return FakeCompanionRepository(store)


@pytest.fixture
def ledger(
    ledger_repo: FakeLedgerRepository, companion_repo: FakeCompanionRepository
) -> LedgerApplicationService:
    ids = iter(f"pay-{i}" for i in range(1, 10_000))
    return LedgerApplicationService(
        repo=ledger_repo,
        companion_repo=companion_repo,
        leg_cost_cents=150,
        id_factory=lambda: next(ids),
    )


@pytest.fixture
def companions(
    ledger_repo: FakeLedgerRepository, companion_repo: FakeCompanionRepository
) -> CompanionApplicationService:
    return CompanionApplicationService(repo=companion_repo, ledger_repo=ledger_repo)


@pytest.fixture
def app(
    store: InMemoryStore,
    ledger: LedgerApplicationService,
    companions: CompanionApplicationService,
) -> FastAPI:
    application = create_app(Settings(LEG_COST_CENTS=150))
    application.state.ledger_service = ledger
    application.state.companion_service = companions
    application.state.dispatcher = LedgerDispatcher(ledger, companions)

    async def _session() -> AsyncGenerator[FakeSession, None]:
        yield FakeSession(store)

    application.dependency_overrides[get_db_session] = _session
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

"""Integration-test fixtures.

These tests run against a real PostgreSQL with the migrations applied:

    alembic -x db_url=$RL_INTEGRATION_DATABASE_URL upgrade head
    RL_INTEGRATION_DATABASE_URL=postgresql+asyncpg://... pytest tests/integration

Without RL_INTEGRATION_DATABASE_URL every test here is skipped. All tests share
one session-scoped event loop so the engine pool stays valid.
"""

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from config.settings import Settings
from src.main import create_app
from src.rl_common.database import build_engine, build_session_factory

DATABASE_URL = os.environ.get("RL_INTEGRATION_DATABASE_URL")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    skip = pytest.mark.skip(reason="RL_INTEGRATION_DATABASE_URL not set")
    for item in items:
        if "tests/integration" in str(item.path).replace(os.sep, "/"):
            item.add_marker(pytest.mark.integration)
            if not DATABASE_URL:
                item.add_marker(skip)


@pytest.fixture(scope="session")
def settings() -> Settings:
    return Settings(DATABASE_URL=DATABASE_URL or "", LEG_COST_CENTS=150)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def engine(settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    engine = build_engine(settings)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client(
    settings: Settings, engine: AsyncEngine
) -> AsyncGenerator[AsyncClient, None]:
    """Session-scoped client wired to the integration database."""
    app = create_app(settings)
    # ASGITransport does not run the lifespan; wire the pool by hand
    app.state.session_factory = build_session_factory(engine)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session", autouse=True)
async def clean_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.execute(text("DELETE FROM payments"))
        await conn.execute(text("DELETE FROM trips"))
        await conn.execute(text("DELETE FROM companions"))

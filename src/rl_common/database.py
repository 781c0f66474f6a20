"""Async engine/session construction and unit-of-work helpers.

The engine is built from explicit Settings (see src.main.create_app) and kept
on app.state; nothing here connects at import time.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import Settings
from src.rl_common.errors import StorageError


def build_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with request.app.state.session_factory() as session:
        yield session


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """One write unit of work: commit on success, rollback on any failure.

    SQLAlchemy failures are re-raised as StorageError; domain errors pass through
    untouched after the rollback.
    """
    try:
        yield db
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StorageError(str(exc)) from exc
    except BaseException:
        await db.rollback()
        raise


@asynccontextmanager
async def reading(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Read-only scope: no commit, SQLAlchemy failures become StorageError."""
    try:
        yield db
    except SQLAlchemyError as exc:
        raise StorageError(str(exc)) from exc

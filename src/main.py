"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import Settings, get_settings
from src.rl_admin.api.router import router as admin_router
from src.rl_common.database import build_engine, build_session_factory
from src.rl_common.errors import AppError, ValidationError
from src.rl_common.response import error_response
from src.rl_companion.api.router import router as companion_router
from src.rl_companion.application.service import CompanionApplicationService
from src.rl_gateway.middleware.request_log import RequestLogMiddleware
from src.rl_ledger.api.router import router as ledger_router
from src.rl_ledger.application.dispatcher import LedgerDispatcher
from src.rl_ledger.application.service import LedgerApplicationService

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application from explicit settings; no module-level singletons."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup: connect, verify DB, optionally seed. Shutdown: dispose."""
        logging.basicConfig(level=settings.LOG_LEVEL)
        engine = build_engine(settings)
        app.state.session_factory = build_session_factory(engine)
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        if settings.SEED_DEFAULT_COMPANIONS:
            async with app.state.session_factory() as session:
                await app.state.companion_service.bootstrap_defaults(
                    session, settings.DEFAULT_COMPANIONS
                )
        logger.info("%s started (leg cost %d cents)", settings.APP_NAME, settings.LEG_COST_CENTS)
        yield
        await engine.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.ledger_service = LedgerApplicationService(leg_cost_cents=settings.LEG_COST_CENTS)
    app.state.companion_service = CompanionApplicationService()
    app.state.dispatcher = LedgerDispatcher(
        app.state.ledger_service, app.state.companion_service
    )

    app.add_middleware(RequestLogMiddleware)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.http_status >= 500:
            logger.error("%s (code=%d)", exc.message, exc.code)
        resp = error_response(exc.code, exc.message)
        resp.request_id = getattr(request.state, "request_id", resp.request_id)
        return JSONResponse(
            status_code=exc.http_status,
            content=resp.model_dump(),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {"loc": ("body",), "msg": "invalid"}
        where = ".".join(str(p) for p in first["loc"])
        return await app_error_handler(request, ValidationError(f"{where}: {first['msg']}"))

    app.include_router(companion_router, prefix="/api/v1")
    app.include_router(ledger_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": VERSION}

    return app


app = create_app()

"""FastAPI dependencies resolving the services built by create_app().

Services live on app.state for the lifetime of the application; tests swap
them (or the session dependency) through app.dependency_overrides.
"""

from fastapi import Request

from src.rl_companion.application.service import CompanionApplicationService
from src.rl_ledger.application.dispatcher import LedgerDispatcher
from src.rl_ledger.application.service import LedgerApplicationService


def get_ledger_service(request: Request) -> LedgerApplicationService:
    return request.app.state.ledger_service  # type: ignore[no-any-return]


def get_companion_service(request: Request) -> CompanionApplicationService:
    return request.app.state.companion_service  # type: ignore[no-any-return]


def get_dispatcher(request: Request) -> LedgerDispatcher:
    return request.app.state.dispatcher  # type: ignore[no-any-return]

"""FastAPI dependency injection for the store, identity provider and settings.

Also maps league errors onto HTTP responses.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from fableague.auth.identity import IdentityError, IdentityProvider
from fableague.config import Settings
from fableague.core.errors import (
    AdminProtectedError,
    ImmutableRecordError,
    LeagueError,
    MalformedBackupError,
    NotFoundError,
    PartialWriteError,
    SubmissionValidationError,
)
from fableague.db.store import LeagueStore

logger = logging.getLogger(__name__)


async def get_store(request: Request) -> LeagueStore:
    """Get the league store from app state."""
    return request.app.state.store


async def get_identity(request: Request) -> IdentityProvider:
    return request.app.state.identity


async def get_settings(request: Request) -> Settings:
    return request.app.state.settings


StoreDep = Annotated[LeagueStore, Depends(get_store)]
IdentityDep = Annotated[IdentityProvider, Depends(get_identity)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


_STATUS_BY_ERROR: list[tuple[type[LeagueError], int]] = [
    (SubmissionValidationError, 422),
    (MalformedBackupError, 422),
    (IdentityError, 422),
    (AdminProtectedError, 409),
    (ImmutableRecordError, 409),
    (NotFoundError, 404),
    (PartialWriteError, 500),
]


def status_for(exc: LeagueError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


async def league_error_handler(request: Request, exc: LeagueError) -> JSONResponse:
    status = status_for(exc)
    body: dict = {"detail": str(exc)}
    if isinstance(exc, SubmissionValidationError):
        body["problems"] = exc.problems
    elif isinstance(exc, PartialWriteError):
        body["committed"] = exc.committed
        body["failed"] = exc.failed
        body["skipped"] = exc.skipped
        logger.error("partial_write path=%s %s", request.url.path, exc)
    return JSONResponse(status_code=status, content=body)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LeagueError, league_error_handler)

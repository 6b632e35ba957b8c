"""FastAPI dependencies for authentication: the current user from the session cookie.

Roles are not trusted from the cookie. ``require_admin`` re-reads the account
from the store on every request, so a demotion takes effect immediately.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response
from itsdangerous import BadSignature, URLSafeTimedSerializer
from pydantic import BaseModel

from fableague.config import Settings
from fableague.db.store import LeagueStore
from fableague.models.player import Account

logger = logging.getLogger(__name__)

# Session cookie lives for 7 days (seconds).
SESSION_MAX_AGE = 7 * 24 * 60 * 60
SESSION_COOKIE_NAME = "fableague_session"


class SessionUser(BaseModel):
    """Minimal user info stored in the signed session cookie."""

    user_id: str
    email: str


def _get_serializer(request: Request) -> URLSafeTimedSerializer:
    """Build a signer from the app's session secret key."""
    settings: Settings = request.app.state.settings
    return URLSafeTimedSerializer(settings.session_secret_key, salt="fableague-session")


def set_session_cookie(request: Request, response: Response, user: SessionUser) -> None:
    settings: Settings = request.app.state.settings
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=_get_serializer(request).dumps(user.model_dump()),
        max_age=SESSION_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME)


async def get_current_user(request: Request) -> SessionUser | None:
    """Extract the current user from the signed session cookie.

    Optional auth: returns None if the user is not logged in or the cookie
    is invalid or expired.
    """
    raw = request.cookies.get(SESSION_COOKIE_NAME)
    if not raw:
        return None

    serializer = _get_serializer(request)
    try:
        data = serializer.loads(raw, max_age=SESSION_MAX_AGE)
        return SessionUser(**data)
    except BadSignature:
        logger.debug("session_cookie_rejected")
        return None
    except (TypeError, ValueError):
        logger.debug("session_cookie_unreadable", exc_info=True)
        return None


OptionalUser = Annotated[SessionUser | None, Depends(get_current_user)]


async def require_user(current_user: OptionalUser) -> SessionUser:
    if current_user is None:
        raise HTTPException(status_code=401, detail="Login required")
    return current_user


async def require_admin(request: Request, current_user: OptionalUser) -> Account:
    """Gate admin routes: 401 without a session, 403 unless the account is ADMIN."""
    if current_user is None:
        raise HTTPException(status_code=401, detail="Login required")
    store: LeagueStore = request.app.state.store
    account = await store.get_account(current_user.user_id)
    if account is None or not account.is_admin:
        logger.warning("admin_access_denied user_id=%s", current_user.user_id)
        raise HTTPException(status_code=403, detail="Administrator access required")
    return account


CurrentUser = Annotated[SessionUser, Depends(require_user)]
AdminAccount = Annotated[Account, Depends(require_admin)]

"""Email/password login, sign-up and logout routes.

Credentials are checked by the identity provider; on success the browser
gets a signed session cookie carrying the user id.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel

from fableague.api.deps import IdentityDep, StoreDep
from fableague.auth.deps import (
    OptionalUser,
    SessionUser,
    clear_session_cookie,
    set_session_cookie,
)
from fableague.core.lifecycle import register_account

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


class SignupRequest(LoginRequest):
    name: str


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    store: StoreDep,
    identity: IdentityDep,
) -> dict:
    user_id = await identity.authenticate(body.email, body.password)
    if user_id is None:
        logger.info("login_failed email=%s", body.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    account = await store.get_account(user_id)
    if account is None:
        logger.warning("login_without_account user_id=%s", user_id)
        raise HTTPException(status_code=403, detail="No league account for this login")
    set_session_cookie(request, response, SessionUser(user_id=user_id, email=account.email))
    logger.info("login_ok user_id=%s", user_id)
    return {"data": account.to_document()}


@router.post("/signup", status_code=201)
async def signup(
    body: SignupRequest,
    request: Request,
    response: Response,
    store: StoreDep,
    identity: IdentityDep,
) -> dict:
    account, player = await register_account(
        store, identity, body.email, body.password, body.name
    )
    set_session_cookie(request, response, SessionUser(user_id=account.id, email=account.email))
    return {"data": {"account": account.to_document(), "player": player.to_document()}}


@router.post("/logout")
async def logout(response: Response, current_user: OptionalUser) -> dict:
    clear_session_cookie(response)
    if current_user is not None:
        logger.info("logout user_id=%s", current_user.user_id)
    return {"status": "ok"}


@router.get("/me")
async def me(current_user: OptionalUser, store: StoreDep) -> dict:
    if current_user is None:
        return {"data": None}
    account = await store.get_account(current_user.user_id)
    return {"data": account.to_document() if account else None}

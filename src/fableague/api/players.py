"""Player roster API."""

from __future__ import annotations

from fastapi import APIRouter, Response
from pydantic import BaseModel

from fableague.api.deps import IdentityDep, StoreDep
from fableague.auth.deps import AdminAccount
from fableague.core import lifecycle
from fableague.core.errors import NotFoundError
from fableague.models.player import Role

router = APIRouter(prefix="/api/players", tags=["players"])


class CreatePlayerRequest(BaseModel):
    name: str
    id: str | None = None


class RenamePlayerRequest(BaseModel):
    name: str


class LinkAccountRequest(BaseModel):
    email: str
    password: str | None = None
    role: Role = Role.PLAYER


@router.get("")
async def list_players(store: StoreDep) -> dict:
    players = await store.list_players()
    return {"data": [p.to_document() for p in players]}


@router.get("/{player_id}")
async def get_player(player_id: str, store: StoreDep) -> dict:
    player = await store.get_player(player_id)
    if player is None:
        raise NotFoundError(f"Player {player_id} not found")
    return {"data": player.to_document()}


@router.post("", status_code=201)
async def create_player(body: CreatePlayerRequest, store: StoreDep, admin: AdminAccount) -> dict:
    player = await lifecycle.create_player(store, body.name, body.id)
    return {"data": player.to_document()}


@router.patch("/{player_id}")
async def rename_player(
    player_id: str, body: RenamePlayerRequest, store: StoreDep, admin: AdminAccount
) -> dict:
    player = await lifecycle.rename_player(store, player_id, body.name)
    return {"data": player.to_document()}


@router.delete("/{player_id}", status_code=204)
async def delete_player(player_id: str, store: StoreDep, admin: AdminAccount) -> Response:
    await lifecycle.delete_player(store, player_id)
    return Response(status_code=204)


@router.put("/{player_id}/account")
async def link_account(
    player_id: str,
    body: LinkAccountRequest,
    store: StoreDep,
    identity: IdentityDep,
    admin: AdminAccount,
) -> dict:
    account = await lifecycle.link_account(
        store, identity, player_id, body.email, body.password, body.role
    )
    return {"data": account.to_document()}

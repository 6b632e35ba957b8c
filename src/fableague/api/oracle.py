"""Oracle chat endpoints."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from fableague.ai.oracle import analyze_meta, stream_oracle_reply
from fableague.api.deps import SettingsDep, StoreDep
from fableague.auth.deps import CurrentUser

router = APIRouter(prefix="/api/oracle", tags=["oracle"])


class ChatTurn(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    history: list[ChatTurn] = Field(default_factory=list)


@router.post("/chat")
async def chat(
    body: ChatRequest, store: StoreDep, settings: SettingsDep, user: CurrentUser
) -> StreamingResponse:
    """Stream the Oracle's reply as plain text."""
    players = await store.list_players()
    chunks = stream_oracle_reply(
        players,
        [turn.model_dump() for turn in body.history],
        body.message,
        settings.anthropic_api_key,
        settings.oracle_model,
    )
    return StreamingResponse(chunks, media_type="text/plain; charset=utf-8")


@router.get("/meta")
async def meta(store: StoreDep, settings: SettingsDep, user: CurrentUser) -> dict:
    players = await store.list_players()
    analysis = await analyze_meta(players, settings.anthropic_api_key, settings.oracle_model)
    return {"data": {"analysis": analysis}}

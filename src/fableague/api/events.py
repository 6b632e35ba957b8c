"""SSE (Server-Sent Events) endpoint for live leaderboard and history updates."""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from fableague.core.change_feed import COLLECTIONS, ChangeFeed

router = APIRouter(prefix="/api/events", tags=["events"])
logger = logging.getLogger(__name__)

_HEARTBEAT_INTERVAL = 15  # seconds

# Anonymous clients can hold streams open indefinitely.
_MAX_SSE_CONNECTIONS = 100
_connection_semaphore = asyncio.Semaphore(_MAX_SSE_CONNECTIONS)


def _get_feed(request: Request) -> ChangeFeed:
    return request.app.state.store.feed


@router.get("/stream")
async def sse_stream(request: Request, collection: str | None = None) -> StreamingResponse:
    """Stream one event per committed document write.

    Query params:
        collection: optional filter, one of ``players``, ``tournaments``,
                    ``accounts``. All collections when omitted.

    Events carry the collection, the operation and the document id; clients
    re-read the document they render.

    Errors:
        400: unknown collection
        429: global connection limit reached
    """
    if collection is not None and collection not in COLLECTIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown collection {collection!r}. Valid values: {sorted(COLLECTIONS)}",
        )
    if _connection_semaphore.locked():
        raise HTTPException(
            status_code=429,
            detail=f"Too many concurrent SSE connections (limit: {_MAX_SSE_CONNECTIONS}).",
        )

    feed = _get_feed(request)

    async def generate():
        async with _connection_semaphore:
            yield ": connected\n\n"
            async with feed.subscribe(collection) as sub:
                while True:
                    if await request.is_disconnected():
                        break
                    change = await sub.get(timeout=_HEARTBEAT_INTERVAL)
                    if change is None:
                        yield ": heartbeat\n\n"
                        continue
                    yield f"event: {change['collection']}\ndata: {json.dumps(change)}\n\n"

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.get("/health")
async def events_health(request: Request) -> dict:
    feed = _get_feed(request)
    return {
        "status": "ok",
        "subscribers": feed.subscriber_count,
        "published": feed.published,
    }

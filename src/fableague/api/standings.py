"""Leaderboard and per-format statistics endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from fableague.api.deps import SettingsDep, StoreDep
from fableague.core.projection import leaderboard, stats_summary
from fableague.models.tournament import TournamentFormat

router = APIRouter(prefix="/api", tags=["standings"])


@router.get("/leaderboard")
async def get_leaderboard(store: StoreDep, settings: SettingsDep) -> dict:
    players = await store.list_players()
    return {"data": leaderboard(players, settings.fableague_recent_window)}


@router.get("/stats")
async def get_stats(store: StoreDep, format: str | None = None, top: int = 5) -> dict:
    """Totals recomputed from history, optionally for one format.

    ``format=ALL`` (or no format) covers every tournament.
    """
    selected: TournamentFormat | None = None
    if format is not None and format.upper() != "ALL":
        try:
            selected = TournamentFormat(format)
        except ValueError:
            raise HTTPException(
                status_code=422,
                detail=(
                    f"Unknown format {format!r}. "
                    f"Valid values: {[f.value for f in TournamentFormat]}"
                ),
            ) from None
    players = await store.list_players()
    tournaments = await store.list_tournaments()
    return {"data": stats_summary(players, tournaments, selected, top)}

"""Tournament history, results submission and aggregate repair."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from fableague.api.deps import SettingsDep, StoreDep
from fableague.auth.deps import AdminAccount
from fableague.core.errors import NotFoundError
from fableague.core.projection import sort_history, tournament_winners
from fableague.core.reconcile import repair_players
from fableague.core.submission import record_tournament
from fableague.models.tournament import TournamentRecord, TournamentSubmission

router = APIRouter(prefix="/api/tournaments", tags=["tournaments"])


class RepairRequest(BaseModel):
    player_ids: list[str] | None = None


def _with_winners(record: TournamentRecord) -> dict:
    doc = record.to_document()
    doc["winners"] = [r.player_id for r in tournament_winners(record)]
    return doc


@router.get("")
async def list_tournaments(store: StoreDep, format: str | None = None) -> dict:
    tournaments = sort_history(await store.list_tournaments())
    if format is not None:
        tournaments = [t for t in tournaments if t.format == format]
    return {"data": [_with_winners(t) for t in tournaments]}


@router.get("/{tournament_id}")
async def get_tournament(tournament_id: str, store: StoreDep) -> dict:
    record = await store.get_tournament(tournament_id)
    if record is None:
        raise NotFoundError(f"Tournament {tournament_id} not found")
    return {"data": _with_winners(record)}


@router.post("", status_code=201)
async def submit_tournament(
    body: TournamentSubmission,
    store: StoreDep,
    settings: SettingsDep,
    admin: AdminAccount,
    continue_on_error: bool = False,
) -> dict:
    """Record a tournament. On success the client is pointed at the leaderboard."""
    outcome = await record_tournament(
        store,
        body.results,
        body.new_players,
        body.date,
        body.format,
        max_wins=settings.fableague_max_wins,
        stop_on_error=not continue_on_error,
    )
    return {
        "data": {
            "tournament": outcome.tournament.to_document(),
            "createdPlayers": [p.to_document() for p in outcome.created_players],
            "updatedPlayers": [p.to_document() for p in outcome.updated_players],
        },
        "next": "/api/leaderboard",
    }


@router.post("/repair")
async def repair(store: StoreDep, admin: AdminAccount, body: RepairRequest | None = None) -> dict:
    repaired = await repair_players(store, body.player_ids if body else None)
    return {"data": {"repaired": repaired}}

"""Rebuild player aggregates from tournament history.

Tournament records are the source of truth. When a submission fails part-way
(``PartialWriteError``), the tournament may be committed while some of its
players were never updated; ``repair_players`` brings them back in line.

A player is stale only when history holds more of their results than their
counters record. Players whose stored stats predate the recorded history
(a restore from a backup without tournaments, say) are left alone.
Rebuilt ``recent_performance`` follows chronological order (tournament date,
then commit order).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from fableague.core.aggregation import apply_result
from fableague.db.store import LeagueStore
from fableague.models.player import Player
from fableague.models.tournament import TournamentRecord

logger = logging.getLogger(__name__)


def recompute_player(player: Player, tournaments: Iterable[TournamentRecord]) -> Player:
    """Fold every result of *player* in *tournaments* (oldest first) into a fresh player."""
    rebuilt = player.model_copy(
        update={
            "hero_stats": {},
            "tournaments_played": 0,
            "total_wins": 0,
            "total_points": 0,
            "recent_performance": [],
        }
    )
    for t in tournaments:
        entry = t.result_for(player.id)
        if entry is not None:
            rebuilt = apply_result(rebuilt, entry.wins, entry.hero_played)
    return rebuilt


def history_count(player_id: str, tournaments: Iterable[TournamentRecord]) -> int:
    return sum(1 for t in tournaments if t.result_for(player_id) is not None)


def is_stale(player: Player, tournaments: Sequence[TournamentRecord]) -> bool:
    return player.tournaments_played < history_count(player.id, tournaments)


def find_stale_players(
    players: Iterable[Player], tournaments: Sequence[TournamentRecord]
) -> list[Player]:
    """Players missing results that history has recorded for them."""
    return [p for p in players if is_stale(p, tournaments)]


async def repair_players(
    store: LeagueStore, player_ids: Iterable[str] | None = None
) -> list[str]:
    """Rewrite stale players from tournament history. Returns the repaired ids.

    With *player_ids* only those players are checked. Unknown ids are ignored.
    """
    tournaments = await store.list_tournaments_chronological()
    players = await store.list_players()
    if player_ids is not None:
        wanted = set(player_ids)
        players = [p for p in players if p.id in wanted]

    repaired: list[str] = []
    for player in find_stale_players(players, tournaments):
        fixed = recompute_player(player, tournaments)
        logger.info(
            "player_repaired id=%s tournaments_played=%d->%d total_points=%d->%d",
            player.id,
            player.tournaments_played,
            fixed.tournaments_played,
            player.total_points,
            fixed.total_points,
        )
        await store.save_player(fixed)
        repaired.append(player.id)
    return repaired

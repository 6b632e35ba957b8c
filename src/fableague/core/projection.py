"""Leaderboard and statistics views.

Pure functions over explicit snapshots of the player roster and tournament
history. Nothing here reads the store or mutates its inputs.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from fableague.models.constants import POINTS_PER_TOURNAMENT, POINTS_PER_WIN
from fableague.models.player import Player
from fableague.models.tournament import (
    TournamentFormat,
    TournamentRecord,
    TournamentResultEntry,
)


@dataclass
class PlayerStats:
    """Per-player totals folded from a (possibly filtered) slice of history."""

    player_id: str
    name: str
    total_points: int = 0
    tournaments_played: int = 0
    total_wins: int = 0
    hero_stats: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "playerId": self.player_id,
            "name": self.name,
            "totalPoints": self.total_points,
            "tournamentsPlayed": self.tournaments_played,
            "totalWins": self.total_wins,
            "heroStats": dict(self.hero_stats),
            "topHero": top_hero_of(self.hero_stats),
        }


def rank_players(players: Iterable[Player]) -> list[Player]:
    """Sort by total points, highest first. Ties keep their input order."""
    return sorted(players, key=lambda p: -p.total_points)


def top_hero_of(hero_stats: dict[str, int]) -> str | None:
    """Most-played hero; ties go to the alphabetically first name."""
    if not hero_stats:
        return None
    return min(hero_stats.items(), key=lambda item: (-item[1], item[0]))[0]


def top_hero(player: Player) -> str | None:
    return top_hero_of(player.hero_stats)


def average_wins(player: Player) -> float:
    if player.tournaments_played == 0:
        return 0.0
    return round(player.total_wins / player.tournaments_played, 1)


def recent_form(player: Player, window: int = 5) -> list[int]:
    """The last *window* per-tournament win counts, oldest first."""
    if window <= 0:
        return []
    return list(player.recent_performance[-window:])


def leaderboard(players: Iterable[Player], window: int = 5) -> list[dict]:
    """Ranked rows ready for the API."""
    rows: list[dict] = []
    for position, p in enumerate(rank_players(players), start=1):
        rows.append(
            {
                "rank": position,
                "playerId": p.id,
                "name": p.name,
                "totalPoints": p.total_points,
                "tournamentsPlayed": p.tournaments_played,
                "totalWins": p.total_wins,
                "topHero": top_hero(p),
                "averageWins": average_wins(p),
                "recentForm": recent_form(p, window),
            }
        )
    return rows


def filter_by_format(
    tournaments: Iterable[TournamentRecord], format: TournamentFormat | str | None
) -> list[TournamentRecord]:
    """Tournaments of one format; every tournament when *format* is None."""
    if format is None:
        return list(tournaments)
    return [t for t in tournaments if t.format == format]


def format_stats(
    players: Sequence[Player],
    tournaments: Iterable[TournamentRecord],
    format: TournamentFormat | str | None = None,
) -> list[PlayerStats]:
    """Recompute per-player totals from the tournaments of one format.

    Every current player appears, with zeroed stats if they never played
    that format. Results of players who are no longer on the roster are
    dropped.
    """
    stats: dict[str, PlayerStats] = {
        p.id: PlayerStats(player_id=p.id, name=p.name) for p in players
    }
    for t in filter_by_format(tournaments, format):
        for r in t.results:
            row = stats.get(r.player_id)
            if row is None:
                continue
            row.total_points += POINTS_PER_TOURNAMENT + r.wins * POINTS_PER_WIN
            row.tournaments_played += 1
            row.total_wins += r.wins
            if r.hero_played:
                row.hero_stats[r.hero_played] = row.hero_stats.get(r.hero_played, 0) + 1
    return list(stats.values())


def hero_distribution(stats: Iterable[PlayerStats]) -> list[tuple[str, int]]:
    """Total plays per hero across all players, most played first."""
    totals: dict[str, int] = {}
    for row in stats:
        for hero, count in row.hero_stats.items():
            totals[hero] = totals.get(hero, 0) + count
    return sorted(totals.items(), key=lambda item: (-item[1], item[0]))


def top_by_points(stats: Iterable[PlayerStats], n: int = 5) -> list[PlayerStats]:
    ranked = sorted(stats, key=lambda s: -s.total_points)
    return [s for s in ranked if s.total_points > 0][:n]


def top_by_participation(stats: Iterable[PlayerStats], n: int = 5) -> list[PlayerStats]:
    ranked = sorted(stats, key=lambda s: -s.tournaments_played)
    return [s for s in ranked if s.tournaments_played > 0][:n]


def tournament_winners(record: TournamentRecord) -> list[TournamentResultEntry]:
    """Every result tied for the most wins (empty for an empty record)."""
    if not record.results:
        return []
    best = max(r.wins for r in record.results)
    return [r for r in record.results if r.wins == best]


def sort_history(tournaments: Iterable[TournamentRecord]) -> list[TournamentRecord]:
    """Most recent first. Same-day tournaments keep their input order."""
    return sorted(tournaments, key=lambda t: t.date, reverse=True)


def stats_summary(
    players: Sequence[Player],
    tournaments: Sequence[TournamentRecord],
    format: TournamentFormat | str | None = None,
    top_n: int = 5,
) -> dict:
    """Everything the stats view shows for one format filter."""
    stats = format_stats(players, tournaments, format)
    return {
        "format": str(format) if format is not None else "ALL",
        "tournaments": len(filter_by_format(tournaments, format)),
        "players": [s.to_dict() for s in stats],
        "heroDistribution": [
            {"hero": hero, "count": count} for hero, count in hero_distribution(stats)
        ],
        "topPoints": [s.to_dict() for s in top_by_points(stats, top_n)],
        "topParticipation": [s.to_dict() for s in top_by_participation(stats, top_n)],
    }

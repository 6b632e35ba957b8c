"""Tournament aggregation: validate a results batch and stage its write-set.

Everything here is pure. ``stage_tournament`` turns a batch of results into a
``TournamentWritePlan`` (new player documents, one tournament record, the
complete updated player documents) without touching the store; applying the
plan is ``fableague.core.submission``'s job.

Scoring: one point per tournament entered plus one point per win, so for
every player ``total_points == tournaments_played + total_wins``.

New players are paired with the id synthesized for them when the plan is
staged. They are never looked up by name, so two new players sharing a name
stay two distinct players.
"""

from __future__ import annotations

import datetime
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from fableague.core.errors import SubmissionValidationError
from fableague.models.constants import MAX_WINS, POINTS_PER_TOURNAMENT, POINTS_PER_WIN
from fableague.models.player import Player
from fableague.models.tournament import (
    NewPlayerSpec,
    ResultInput,
    TournamentFormat,
    TournamentRecord,
    TournamentResultEntry,
)


def new_document_id() -> str:
    return str(uuid.uuid4())


def blank_player(name: str, player_id: str | None = None) -> Player:
    """A player with zeroed statistics."""
    return Player(id=player_id or new_document_id(), name=name)


def apply_result(player: Player, wins: int, hero_played: str) -> Player:
    """Return *player* with one tournament's delta applied.

    An empty ``hero_played`` still counts the tournament but leaves the hero
    histogram alone.
    """
    hero_stats = dict(player.hero_stats)
    if hero_played:
        hero_stats[hero_played] = hero_stats.get(hero_played, 0) + 1
    return player.model_copy(
        update={
            "hero_stats": hero_stats,
            "tournaments_played": player.tournaments_played + 1,
            "total_wins": player.total_wins + wins,
            "total_points": player.total_points + POINTS_PER_TOURNAMENT + wins * POINTS_PER_WIN,
            "recent_performance": [*player.recent_performance, wins],
        }
    )


@dataclass
class TournamentWritePlan:
    """The full write-set of one submission, in the order it must be applied.

    ``new_players`` are the zeroed documents created first so the tournament
    can reference them; ``updated_players`` are complete documents, never
    partial deltas, in tournament-result order.
    """

    tournament: TournamentRecord
    new_players: list[Player] = field(default_factory=list)
    updated_players: list[Player] = field(default_factory=list)

    @property
    def created_ids(self) -> list[str]:
        return [p.id for p in self.new_players]

    def write_keys(self) -> list[str]:
        keys = [f"players/{p.id}" for p in self.new_players]
        keys.append(f"tournaments/{self.tournament.id}")
        keys.extend(f"players/{p.id}" for p in self.updated_players)
        return keys


def _coerce_date(value: datetime.date | str | None, problems: list[str]) -> datetime.date | None:
    if value is None or value == "":
        problems.append("date is required")
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        problems.append(f"date {value!r} is not an ISO calendar date")
        return None


def _coerce_format(
    value: TournamentFormat | str | None, problems: list[str]
) -> TournamentFormat | None:
    if value is None or value == "":
        problems.append("format is required")
        return None
    try:
        return TournamentFormat(value)
    except ValueError:
        valid = ", ".join(f.value for f in TournamentFormat)
        problems.append(f"format {value!r} is not one of: {valid}")
        return None


def validate_submission(
    results: Sequence[ResultInput],
    new_player_specs: Sequence[NewPlayerSpec],
    date: datetime.date | str | None,
    format: TournamentFormat | str | None,
    pool: Sequence[Player],
    *,
    max_wins: int = MAX_WINS,
) -> tuple[datetime.date, TournamentFormat]:
    """Check a batch before anything is written.

    Returns the normalized ``(date, format)``. Raises
    ``SubmissionValidationError`` listing every problem found.
    """
    problems: list[str] = []
    day = _coerce_date(date, problems)
    fmt = _coerce_format(format, problems)

    if not results and not new_player_specs:
        problems.append("a tournament needs at least one player")

    pool_ids = {p.id for p in pool}
    seen: set[str] = set()
    for r in results:
        if r.player_id in seen:
            problems.append(f"player {r.player_id} appears more than once")
        seen.add(r.player_id)
        if r.player_id not in pool_ids:
            problems.append(f"player {r.player_id} is not in the player pool")
        if not 0 <= r.wins <= max_wins:
            problems.append(f"player {r.player_id} wins must be between 0 and {max_wins}")

    for i, spec in enumerate(new_player_specs):
        if not spec.name.strip():
            problems.append(f"new player #{i + 1} needs a name")
        if not 0 <= spec.initial_wins <= max_wins:
            problems.append(f"new player #{i + 1} wins must be between 0 and {max_wins}")

    if problems or day is None or fmt is None:
        raise SubmissionValidationError(problems)
    return day, fmt


def stage_tournament(
    results: Sequence[ResultInput],
    new_player_specs: Sequence[NewPlayerSpec],
    date: datetime.date | str | None,
    format: TournamentFormat | str | None,
    pool: Sequence[Player],
    *,
    max_wins: int = MAX_WINS,
    id_factory: Callable[[], str] = new_document_id,
) -> TournamentWritePlan:
    """Validate a batch and compute its complete write-set.

    Players in *pool* with no entry in *results* did not play: they get no
    delta and no line in the tournament record. Result order follows the
    pool, then the new players in spec order.
    """
    day, fmt = validate_submission(
        results, new_player_specs, date, format, pool, max_wins=max_wins
    )

    taken = {p.id for p in pool}

    def fresh_id() -> str:
        candidate = id_factory()
        while candidate in taken:
            candidate = id_factory()
        taken.add(candidate)
        return candidate

    created = [(spec, blank_player(spec.name.strip(), fresh_id())) for spec in new_player_specs]

    by_id = {r.player_id: r for r in results}
    participants: list[tuple[Player, int, str]] = []
    for player in pool:
        result = by_id.get(player.id)
        if result is not None:
            participants.append((player, result.wins, result.hero_played.strip()))
    for spec, player in created:
        participants.append((player, spec.initial_wins, spec.hero_played.strip()))

    entries: list[TournamentResultEntry] = []
    updated: list[Player] = []
    for player, wins, hero in participants:
        entries.append(
            TournamentResultEntry(
                player_id=player.id, player_name=player.name, hero_played=hero, wins=wins
            )
        )
        updated.append(apply_result(player, wins, hero))

    tournament = TournamentRecord(id=fresh_id(), date=day, format=fmt, results=tuple(entries))
    return TournamentWritePlan(
        tournament=tournament,
        new_players=[player for _, player in created],
        updated_players=updated,
    )

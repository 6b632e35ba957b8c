"""Record a tournament: stage the write-set, then apply it one document at a time.

The store has no multi-document transaction, so applying a plan is a
sequence of independent commits:

1. each new player, zeroed (the tournament references them by id)
2. the tournament record
3. each participant's complete updated player document

A failure in steps 1-2 always stops the sequence: player totals must not get
ahead of history. A failure in step 3 stops the remaining player writes by
default; with ``stop_on_error=False`` the other players are still written.
Either way nothing already committed is rolled back and the caller receives a
single ``PartialWriteError``. ``fableague.core.reconcile`` repairs the
resulting stale players from tournament history.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from fableague.core.aggregation import TournamentWritePlan, new_document_id, stage_tournament
from fableague.core.errors import PartialWriteError
from fableague.db.store import LeagueStore, doc_key
from fableague.models.constants import MAX_WINS
from fableague.models.player import Player
from fableague.models.tournament import (
    NewPlayerSpec,
    ResultInput,
    TournamentFormat,
    TournamentRecord,
)

logger = logging.getLogger(__name__)


@dataclass
class SubmissionOutcome:
    """What a fully applied submission committed."""

    tournament: TournamentRecord
    created_players: list[Player] = field(default_factory=list)
    updated_players: list[Player] = field(default_factory=list)


async def apply_plan(
    store: LeagueStore,
    plan: TournamentWritePlan,
    *,
    stop_on_error: bool = True,
) -> SubmissionOutcome:
    """Write a staged plan document by document.

    Raises ``PartialWriteError`` if any write fails; the error lists the
    committed, failed and never-attempted document keys.
    """
    committed: list[str] = []
    failed: list[str] = []
    skipped: list[str] = []
    first_error: BaseException | None = None

    prerequisites: list[tuple[str, Callable[[], Awaitable[object]]]] = [
        (doc_key("players", p.id), lambda p=p: store.save_player(p)) for p in plan.new_players
    ]
    prerequisites.append(
        (
            doc_key("tournaments", plan.tournament.id),
            lambda: store.create_tournament(plan.tournament),
        )
    )
    player_writes: list[tuple[str, Callable[[], Awaitable[object]]]] = [
        (doc_key("players", p.id), lambda p=p: store.save_player(p))
        for p in plan.updated_players
    ]

    for phase, writes, may_continue in (
        ("prerequisite", prerequisites, False),
        ("player_update", player_writes, not stop_on_error),
    ):
        for key, write in writes:
            if failed and not may_continue:
                skipped.append(key)
                continue
            try:
                await write()
            except Exception as e:  # Aggregated into PartialWriteError below
                logger.error(
                    "tournament_write_failed tournament=%s phase=%s key=%s error=%s",
                    plan.tournament.id,
                    phase,
                    key,
                    e,
                )
                failed.append(key)
                if first_error is None:
                    first_error = e
                continue
            committed.append(key)
        if failed and phase == "prerequisite":
            skipped.extend(key for key, _ in player_writes)
            break

    if failed:
        logger.warning(
            "tournament_partial_write tournament=%s committed=%d failed=%d skipped=%d",
            plan.tournament.id,
            len(committed),
            len(failed),
            len(skipped),
        )
        raise PartialWriteError(committed, failed, skipped, cause=first_error) from first_error

    logger.info(
        "tournament_recorded id=%s date=%s format=%s results=%d new_players=%d",
        plan.tournament.id,
        plan.tournament.date.isoformat(),
        plan.tournament.format.value,
        len(plan.tournament.results),
        len(plan.new_players),
    )
    return SubmissionOutcome(
        tournament=plan.tournament,
        created_players=list(plan.new_players),
        updated_players=list(plan.updated_players),
    )


async def record_tournament(
    store: LeagueStore,
    results: Sequence[ResultInput],
    new_player_specs: Sequence[NewPlayerSpec],
    date: datetime.date | str | None,
    format: TournamentFormat | str | None,
    pool: Sequence[Player] | None = None,
    *,
    max_wins: int = MAX_WINS,
    stop_on_error: bool = True,
    id_factory: Callable[[], str] = new_document_id,
) -> SubmissionOutcome:
    """Record one tournament and update every participant's statistics.

    *pool* is the snapshot of current players the batch refers to; it is read
    from the store when omitted. Validation errors are raised before any
    write.
    """
    if pool is None:
        pool = await store.list_players()
    plan = stage_tournament(
        results,
        new_player_specs,
        date,
        format,
        pool,
        max_wins=max_wins,
        id_factory=id_factory,
    )
    return await apply_plan(store, plan, stop_on_error=stop_on_error)

"""Seed a demo league and record a few tournaments.

Usage:
    python scripts/demo_seed.py seed [ROSTER]  # Create players from a YAML roster
    python scripts/demo_seed.py play [N]       # Record N random tournaments (default 1)
    python scripts/demo_seed.py status         # Print the leaderboard
    python scripts/demo_seed.py repair         # Rebuild stale players from history

Uses a local SQLite database (demo_fableague.db) unless DATABASE_URL is set.
"""

from __future__ import annotations

import asyncio
import datetime
import os
import random
import sys
from pathlib import Path

from fableague.core.projection import leaderboard
from fableague.core.reconcile import repair_players
from fableague.core.seeding import load_roster_yaml, seed_roster
from fableague.core.submission import record_tournament
from fableague.db.engine import create_engine, init_schema
from fableague.db.store import LeagueStore
from fableague.models.constants import HEROES
from fableague.models.tournament import ResultInput, TournamentFormat

DEMO_DB = os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///demo_fableague.db")
DEFAULT_ROSTER = Path(__file__).with_name("demo_roster.yaml")


async def _store() -> LeagueStore:
    engine = create_engine(DEMO_DB)
    await init_schema(engine)
    return LeagueStore(engine)


async def seed(roster_path: Path) -> None:
    store = await _store()
    roster = load_roster_yaml(roster_path)
    players = await seed_roster(store, roster)
    print(f"{roster.name}: {len(players)} players")
    for p in players:
        print(f"  {p.name}: {p.id}")
    await store.engine.dispose()


async def play(n: int) -> None:
    store = await _store()
    players = await store.list_players()
    if not players:
        print("No players found. Run 'seed' first.")
        await store.engine.dispose()
        return
    today = datetime.date.today()
    for i in range(n):
        entrants = random.sample(players, k=min(len(players), random.randint(4, 8)))
        outcome = await record_tournament(
            store,
            [
                ResultInput(
                    player_id=p.id, wins=random.randint(0, 4), hero_played=random.choice(HEROES)
                )
                for p in entrants
            ],
            [],
            today - datetime.timedelta(days=7 * (n - i)),
            random.choice(list(TournamentFormat)),
        )
        t = outcome.tournament
        print(f"{t.date} {t.format.value}: {len(t.results)} players ({t.id})")
        players = await store.list_players()
    await store.engine.dispose()


async def status() -> None:
    store = await _store()
    rows = leaderboard(await store.list_players())
    print(f"{'#':>3} {'Player':<20} {'PTS':>4} {'T':>3} {'W':>3}  Top hero")
    print("-" * 55)
    for row in rows:
        print(
            f"{row['rank']:>3} {row['name']:<20} {row['totalPoints']:>4} "
            f"{row['tournamentsPlayed']:>3} {row['totalWins']:>3}  {row['topHero'] or '-'}"
        )
    await store.engine.dispose()


async def repair() -> None:
    store = await _store()
    repaired = await repair_players(store)
    print(f"Repaired {len(repaired)} player(s)")
    for player_id in repaired:
        print(f"  {player_id}")
    await store.engine.dispose()


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    cmd = sys.argv[1]
    if cmd == "seed":
        path = Path(sys.argv[2]) if len(sys.argv) > 2 else DEFAULT_ROSTER
        asyncio.run(seed(path))
    elif cmd == "play":
        n = int(sys.argv[2]) if len(sys.argv) > 2 else 1
        asyncio.run(play(n))
    elif cmd == "status":
        asyncio.run(status())
    elif cmd == "repair":
        asyncio.run(repair())
    else:
        print(f"Unknown command: {cmd}")
        print(__doc__)
        sys.exit(1)


if __name__ == "__main__":
    main()

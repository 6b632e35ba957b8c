"""Tests for YAML roster loading and seeding."""

import tempfile
from pathlib import Path

from fableague.core.seeding import (
    RosterConfig,
    RosterEntry,
    load_roster_yaml,
    save_roster_yaml,
    seed_roster,
)
from fableague.db.store import LeagueStore

DEMO_ROSTER = Path(__file__).parent.parent / "scripts" / "demo_roster.yaml"


class TestRosterYaml:
    def test_round_trip(self):
        config = RosterConfig(
            name="Test League",
            players=[RosterEntry(name="Ana", id="p-ana"), RosterEntry(name="Bruno")],
        )
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "roster.yaml"
            save_roster_yaml(config, path)
            assert "id: p-ana" in path.read_text()
            assert load_roster_yaml(path) == config

    def test_empty_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "empty.yaml"
            path.write_text("")
            roster = load_roster_yaml(path)
        assert roster.players == []

    def test_demo_roster_loads(self):
        roster = load_roster_yaml(DEMO_ROSTER)
        assert len(roster.players) == 8
        assert all(entry.id for entry in roster.players)


class TestSeedRoster:
    async def test_seed_creates_zeroed_players(self, store: LeagueStore):
        roster = RosterConfig(players=[RosterEntry(name="Ana", id="p-ana"), RosterEntry(name="Bo")])
        players = await seed_roster(store, roster)
        assert [p.name for p in players] == ["Ana", "Bo"]
        assert players[0].id == "p-ana"
        assert all(p.total_points == 0 for p in players)
        assert len(await store.list_players()) == 2

    async def test_reseeding_with_ids_is_harmless(self, store: LeagueStore):
        roster = RosterConfig(players=[RosterEntry(name="Ana", id="p-ana")])
        await seed_roster(store, roster)
        await store.merge_player(
            "p-ana", {"total_points": 1, "tournaments_played": 1, "recent_performance": [0]}
        )
        await seed_roster(store, roster)
        players = await store.list_players()
        assert len(players) == 1
        assert players[0].total_points == 1

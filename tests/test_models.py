"""Tests for the league domain models and their wire format."""

import datetime

import pytest
from pydantic import ValidationError

from fableague.models.backup import Backup
from fableague.models.player import Account, Player, Role
from fableague.models.tournament import (
    NewPlayerSpec,
    ResultInput,
    TournamentFormat,
    TournamentRecord,
    TournamentResultEntry,
    TournamentSubmission,
)


class TestPlayer:
    def test_defaults_are_zeroed(self):
        p = Player(id="p-1", name="Ana")
        assert p.tournaments_played == 0
        assert p.total_points == 0
        assert p.hero_stats == {}
        assert p.recent_performance == []
        assert p.invariant_violations() == []

    def test_camel_case_document(self):
        p = Player(
            id="p-1",
            name="Ana",
            hero_stats={"Dash": 1},
            tournaments_played=1,
            total_wins=2,
            total_points=3,
            recent_performance=[2],
        )
        assert p.to_document() == {
            "id": "p-1",
            "name": "Ana",
            "heroStats": {"Dash": 1},
            "tournamentsPlayed": 1,
            "totalWins": 2,
            "totalPoints": 3,
            "recentPerformance": [2],
        }

    def test_loads_from_camel_case(self):
        p = Player.model_validate(
            {"id": "p-1", "name": "Ana", "totalPoints": 4, "tournamentsPlayed": 2, "totalWins": 2}
        )
        assert p.total_points == 4

    def test_invariant_violations_reported(self):
        p = Player(
            id="p-1",
            name="Ana",
            tournaments_played=2,
            total_wins=1,
            total_points=9,
            recent_performance=[1],
            hero_stats={"Kano": 0},
        )
        problems = p.invariant_violations()
        assert len(problems) == 3
        assert any("total_points" in msg for msg in problems)
        assert any("recent_performance has 1" in msg for msg in problems)
        assert any("Kano" in msg for msg in problems)

    def test_negative_counters_rejected(self):
        with pytest.raises(ValidationError):
            Player(id="p-1", name="Ana", total_wins=-1)


class TestAccount:
    def test_role_default_and_admin_flag(self):
        account = Account(id="u-1", email="a@example.com")
        assert account.role is Role.PLAYER
        assert not account.is_admin
        assert Account(id="u-2", email="b@example.com", role="ADMIN").is_admin

    def test_document_uses_player_id_alias(self):
        doc = Account(id="u-1", email="a@example.com", player_id="p-1").to_document()
        assert doc == {"id": "u-1", "email": "a@example.com", "role": "PLAYER", "playerId": "p-1"}


class TestTournament:
    def test_format_wire_values(self):
        assert [f.value for f in TournamentFormat] == ["CC", "Sage", "Limitado"]

    def test_record_is_frozen(self):
        record = TournamentRecord(
            id="t-1",
            date=datetime.date(2024, 1, 10),
            format=TournamentFormat.STANDARD_CONSTRUCTED,
            results=(TournamentResultEntry(player_id="p-1", player_name="Ana", wins=2),),
        )
        with pytest.raises(ValidationError):
            record.date = datetime.date(2025, 1, 1)
        with pytest.raises(ValidationError):
            record.results[0].wins = 5

    def test_record_document(self):
        record = TournamentRecord(
            id="t-1",
            date="2024-01-10",
            format="CC",
            results=[
                {"playerId": "p-1", "playerName": "Ana", "heroPlayed": "Dash", "wins": 2}
            ],
        )
        assert record.to_document() == {
            "id": "t-1",
            "date": "2024-01-10",
            "format": "CC",
            "results": [
                {"playerId": "p-1", "playerName": "Ana", "heroPlayed": "Dash", "wins": 2}
            ],
        }
        assert record.result_for("p-1").wins == 2
        assert record.result_for("p-2") is None

    def test_unknown_format_rejected(self):
        with pytest.raises(ValidationError):
            TournamentRecord(id="t-1", date="2024-01-10", format="Blitz")

    def test_submission_from_camel_case(self):
        body = TournamentSubmission.model_validate(
            {
                "date": "2024-01-10",
                "format": "Sage",
                "results": [{"playerId": "p-1", "wins": 1, "heroPlayed": "Kano"}],
                "newPlayers": [{"name": "NewGuy", "initialWins": 1}],
            }
        )
        assert body.format is TournamentFormat.SKIRMISH
        assert body.results == [ResultInput(player_id="p-1", wins=1, hero_played="Kano")]
        assert body.new_players == [NewPlayerSpec(name="NewGuy", initial_wins=1)]


class TestBackup:
    def test_plaintext_password_ignored(self):
        backup = Backup.model_validate(
            {
                "timestamp": "2024-02-01T00:00:00",
                "players": [],
                "users": [
                    {"id": "u-1", "email": "a@example.com", "role": "ADMIN", "password": "hunter2"}
                ],
            }
        )
        assert "password" not in backup.to_document()["users"][0]
        assert backup.tournaments == []

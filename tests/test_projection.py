"""Tests for leaderboard ranking and format-filtered statistics."""

import datetime

from fableague.core.projection import (
    PlayerStats,
    average_wins,
    filter_by_format,
    format_stats,
    hero_distribution,
    leaderboard,
    rank_players,
    recent_form,
    sort_history,
    stats_summary,
    top_by_participation,
    top_by_points,
    top_hero,
    top_hero_of,
    tournament_winners,
)
from fableague.models.player import Player
from fableague.models.tournament import TournamentFormat, TournamentRecord, TournamentResultEntry


def _player(pid: str, points: int = 0, **kw) -> Player:
    return Player(id=pid, name=pid.title(), total_points=points, **kw)


def _tournament(tid: str, day: str, fmt: str, *results: tuple[str, int, str]) -> TournamentRecord:
    return TournamentRecord(
        id=tid,
        date=day,
        format=fmt,
        results=tuple(
            TournamentResultEntry(player_id=pid, player_name=pid.title(), wins=w, hero_played=h)
            for pid, w, h in results
        ),
    )


class TestRanking:
    def test_sorted_by_points_desc(self):
        ranked = rank_players([_player("a", 3), _player("b", 9), _player("c", 5)])
        assert [p.id for p in ranked] == ["b", "c", "a"]

    def test_ties_keep_input_order(self):
        ranked = rank_players([_player("x", 4), _player("y", 7), _player("z", 4)])
        assert [p.id for p in ranked] == ["y", "x", "z"]

    def test_leaderboard_rows(self):
        p = Player(
            id="a",
            name="Ana",
            hero_stats={"Dash": 2, "Kano": 2, "Bravo": 1},
            tournaments_played=3,
            total_wins=4,
            total_points=7,
            recent_performance=[0, 1, 3],
        )
        rows = leaderboard([_player("b", 2), p], window=2)
        assert rows[0] == {
            "rank": 1,
            "playerId": "a",
            "name": "Ana",
            "totalPoints": 7,
            "tournamentsPlayed": 3,
            "totalWins": 4,
            "topHero": "Dash",
            "averageWins": 1.3,
            "recentForm": [1, 3],
        }
        assert rows[1]["rank"] == 2
        assert rows[1]["topHero"] is None
        assert rows[1]["averageWins"] == 0.0


class TestPlayerHelpers:
    def test_top_hero_tie_is_alphabetical(self):
        assert top_hero_of({"Kano": 3, "Azalea": 3, "Dash": 1}) == "Azalea"
        assert top_hero_of({}) is None

    def test_top_hero(self):
        assert top_hero(_player("a", hero_stats={"Dash": 1, "Kano": 4})) == "Kano"

    def test_average_and_recent_form(self):
        p = Player(
            id="a",
            name="A",
            tournaments_played=3,
            total_wins=2,
            total_points=5,
            recent_performance=[2, 0, 0],
        )
        assert average_wins(p) == 0.7
        assert recent_form(p, 5) == [2, 0, 0]
        assert recent_form(p, 1) == [0]
        assert recent_form(p, 0) == []


class TestFormatStats:
    def test_scenario_d_unplayed_format_zeroes_every_player(self):
        players = [_player("a", 5), _player("b", 2)]
        history = [_tournament("t-1", "2024-01-10", "CC", ("a", 4, "Dash"), ("b", 1, "Kano"))]
        stats = format_stats(players, history, TournamentFormat.SKIRMISH)
        assert [s.player_id for s in stats] == ["a", "b"]
        for s in stats:
            assert s.total_points == 0
            assert s.tournaments_played == 0
            assert s.total_wins == 0
            assert s.hero_stats == {}

    def test_recomputed_from_matching_tournaments(self):
        players = [_player("a"), _player("b")]
        history = [
            _tournament("t-1", "2024-01-10", "CC", ("a", 2, "Dash"), ("b", 0, "")),
            _tournament("t-2", "2024-01-17", "Sage", ("a", 3, "Kano")),
            _tournament("t-3", "2024-01-24", "CC", ("a", 1, "Dash")),
        ]
        a, b = format_stats(players, history, "CC")
        assert (a.tournaments_played, a.total_wins, a.total_points) == (2, 3, 5)
        assert a.hero_stats == {"Dash": 2}
        assert (b.tournaments_played, b.total_points, b.hero_stats) == (1, 1, {})

    def test_no_filter_covers_all_formats(self):
        history = [
            _tournament("t-1", "2024-01-10", "CC", ("a", 2, "Dash")),
            _tournament("t-2", "2024-01-17", "Limitado", ("a", 1, "Dash")),
        ]
        (a,) = format_stats([_player("a")], history)
        assert a.tournaments_played == 2
        assert len(filter_by_format(history, None)) == 2
        assert len(filter_by_format(history, "Limitado")) == 1

    def test_removed_players_dropped(self):
        history = [_tournament("t-1", "2024-01-10", "CC", ("gone", 5, "Dash"), ("a", 1, ""))]
        stats = format_stats([_player("a")], history, "CC")
        assert [s.player_id for s in stats] == ["a"]


class TestSummaries:
    def test_hero_distribution_and_tops(self):
        stats = [
            PlayerStats("a", "A", total_points=6, tournaments_played=2, hero_stats={"Dash": 2}),
            PlayerStats("b", "B", total_points=9, tournaments_played=3, hero_stats={"Kano": 2}),
            PlayerStats("c", "C"),
        ]
        assert hero_distribution(stats) == [("Dash", 2), ("Kano", 2)]
        assert [s.player_id for s in top_by_points(stats, 1)] == ["b"]
        assert [s.player_id for s in top_by_participation(stats)] == ["b", "a"]

    def test_stats_summary_shape(self):
        players = [_player("a")]
        history = [_tournament("t-1", "2024-01-10", "CC", ("a", 2, "Dash"))]
        summary = stats_summary(players, history, None)
        assert summary["format"] == "ALL"
        assert summary["tournaments"] == 1
        assert summary["players"][0]["topHero"] == "Dash"
        assert summary["heroDistribution"] == [{"hero": "Dash", "count": 1}]
        assert stats_summary(players, history, "Sage")["topPoints"] == []


class TestHistory:
    def test_winners_include_ties(self):
        t = _tournament("t-1", "2024-01-10", "CC", ("a", 3, ""), ("b", 3, ""), ("c", 1, ""))
        assert [r.player_id for r in tournament_winners(t)] == ["a", "b"]
        assert tournament_winners(_tournament("t-2", "2024-01-10", "CC")) == []

    def test_sort_history_newest_first(self):
        history = [
            _tournament("old", "2023-12-01", "CC"),
            _tournament("new-1", "2024-02-01", "CC"),
            _tournament("new-2", "2024-02-01", "Sage"),
        ]
        assert [t.id for t in sort_history(history)] == ["new-1", "new-2", "old"]
        assert history[0].date == datetime.date(2023, 12, 1)

"""Backup file shape: ``{timestamp, players, users, tournaments}``."""

from __future__ import annotations

from pydantic import Field

from fableague.models.player import Account, LeagueModel, Player
from fableague.models.tournament import TournamentRecord


class Backup(LeagueModel):
    """Full export of the league. ``users`` holds Account documents.

    Older backups carry a plaintext ``password`` on each user; it is ignored
    on load and never written back.
    """

    timestamp: str
    players: list[Player] = Field(default_factory=list)
    users: list[Account] = Field(default_factory=list)
    tournaments: list[TournamentRecord] = Field(default_factory=list)


class ImportSummary(LeagueModel):
    players: int = 0
    users: int = 0
    tournaments: int = 0

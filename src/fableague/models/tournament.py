"""Tournament records and the inputs of a results submission."""

from __future__ import annotations

import datetime
from enum import StrEnum

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from fableague.models.player import LeagueModel


class TournamentFormat(StrEnum):
    """Tournament ruleset category. Values are the stored wire values."""

    STANDARD_CONSTRUCTED = "CC"
    SKIRMISH = "Sage"
    LIMITED = "Limitado"


class TournamentResultEntry(LeagueModel):
    """One player's line in a tournament record.

    ``player_name`` is a snapshot taken at write time; later renames do not
    reach back into history.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True
    )

    player_id: str
    player_name: str
    hero_played: str = ""
    wins: int = Field(ge=0)


class TournamentRecord(LeagueModel):
    """An immutable historical tournament entry."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True
    )

    id: str
    date: datetime.date
    format: TournamentFormat
    results: tuple[TournamentResultEntry, ...] = ()

    def result_for(self, player_id: str) -> TournamentResultEntry | None:
        for entry in self.results:
            if entry.player_id == player_id:
                return entry
        return None


class ResultInput(LeagueModel):
    """A result for a player who already exists in the pool."""

    player_id: str
    wins: int = Field(default=0, ge=0)
    hero_played: str = ""


class NewPlayerSpec(LeagueModel):
    """A result for a player who is registered by the same submission."""

    name: str
    initial_wins: int = Field(default=0, ge=0)
    hero_played: str = ""


class TournamentSubmission(LeagueModel):
    """Request body for recording a tournament."""

    date: datetime.date
    format: TournamentFormat
    results: list[ResultInput] = Field(default_factory=list)
    new_players: list[NewPlayerSpec] = Field(default_factory=list)

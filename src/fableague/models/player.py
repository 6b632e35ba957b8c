"""Player and Account models.

Wire format is camelCase (``heroStats``, ``tournamentsPlayed``...) to match
the document shapes exchanged with the store and the backup file. Python code
uses the snake_case attribute names.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fableague.models.constants import POINTS_PER_TOURNAMENT, POINTS_PER_WIN


class LeagueModel(BaseModel):
    """Base for every persisted document shape."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict:
        """Serialize to the JSON-compatible camelCase document."""
        return self.model_dump(mode="json", by_alias=True)


class Role(StrEnum):
    ADMIN = "ADMIN"
    PLAYER = "PLAYER"


class Player(LeagueModel):
    """Cumulative league statistics for one player."""

    id: str
    name: str
    hero_stats: dict[str, int] = Field(default_factory=dict)
    tournaments_played: int = Field(default=0, ge=0)
    total_wins: int = Field(default=0, ge=0)
    total_points: int = Field(default=0, ge=0)
    recent_performance: list[int] = Field(default_factory=list)

    def invariant_violations(self) -> list[str]:
        """Return a description of every broken aggregate invariant (empty when consistent)."""
        problems: list[str] = []
        expected_points = (
            self.tournaments_played * POINTS_PER_TOURNAMENT + self.total_wins * POINTS_PER_WIN
        )
        if self.total_points != expected_points:
            problems.append(
                f"total_points={self.total_points} expected {expected_points}"
            )
        if len(self.recent_performance) != self.tournaments_played:
            problems.append(
                f"recent_performance has {len(self.recent_performance)} entries, "
                f"tournaments_played={self.tournaments_played}"
            )
        if sum(self.recent_performance) != self.total_wins:
            problems.append(
                f"recent_performance sums to {sum(self.recent_performance)}, "
                f"total_wins={self.total_wins}"
            )
        zero_heroes = sorted(h for h, count in self.hero_stats.items() if count < 1)
        if zero_heroes:
            problems.append(f"hero_stats has non-positive counts for {zero_heroes}")
        return problems


class Account(LeagueModel):
    """A login identity. Credentials live with the identity provider, never here."""

    id: str
    email: str
    role: Role = Role.PLAYER
    player_id: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

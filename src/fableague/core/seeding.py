"""Roster seeding from YAML.

A roster file lists the players a league starts with:

    name: Rathe Thursday League
    players:
      - name: Ana
      - name: Bruno
        id: bruno-01

Seeding goes through ``create_player``, so running it twice with explicit
ids is harmless.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from fableague.core.lifecycle import create_player
from fableague.db.store import LeagueStore
from fableague.models.player import Player


class RosterEntry(BaseModel):
    name: str
    id: str | None = None


class RosterConfig(BaseModel):
    """Players a league starts with."""

    name: str = "FaB League"
    players: list[RosterEntry] = Field(default_factory=list)


def load_roster_yaml(path: Path) -> RosterConfig:
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return RosterConfig.model_validate(data)


def save_roster_yaml(config: RosterConfig, path: Path) -> None:
    with open(path, "w") as f:
        yaml.dump(
            config.model_dump(exclude_none=True), f, default_flow_style=False, sort_keys=False
        )


async def seed_roster(store: LeagueStore, roster: RosterConfig) -> list[Player]:
    return [await create_player(store, entry.name, entry.id) for entry in roster.players]

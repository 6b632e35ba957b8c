"""Shared constants for league models.

Placed here so the API layer, the core and the database layer can import
them without creating a layer violation.
"""

from __future__ import annotations

# Upper bound on wins a player can record in one tournament.
MAX_WINS = 10

# Participation is worth one point; each win adds one more.
POINTS_PER_TOURNAMENT = 1
POINTS_PER_WIN = 1

# Hero reference list for pickers. Not enforced: any non-empty string is a valid hero.
HEROES: list[str] = [
    "Katsu",
    "Dorinthea",
    "Rhinar",
    "Bravo",
    "Kano",
    "Viserai",
    "Dash",
    "Azalea",
    "Boltyn",
    "Levia",
    "Briar",
    "Oldhim",
    "Lexi",
    "Iyslander",
    "Dromai",
    "Fai",
    "Uzuri",
    "Riptide",
    "Teklovossen",
    "Maxx",
    "Kayo",
    "Betsy",
    "Olympia",
    "Victor",
    "Zen",
    "Nuu",
    "Enigma",
    "Aurora",
    "Oscilio",
    "Florian",
    "Verdance",
]

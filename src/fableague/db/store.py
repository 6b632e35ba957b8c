"""Collection-level document store over the repository.

Every write method opens its own session and commits before returning, so
one call is one committed document. There is deliberately no way to group
several writes into one transaction here: callers that write many documents
get per-document durability and must handle partial failure themselves
(see ``fableague.core.submission``).

Committed writes are announced on the ``ChangeFeed``.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from fableague.core.change_feed import ChangeFeed
from fableague.db.engine import get_session
from fableague.db.repository import Repository
from fableague.models.player import Account, Player
from fableague.models.tournament import TournamentRecord

logger = logging.getLogger(__name__)


def doc_key(collection: str, doc_id: str) -> str:
    return f"{collection}/{doc_id}"


class LeagueStore:
    """Players, tournaments and accounts, one committed write per call."""

    def __init__(self, engine: AsyncEngine, feed: ChangeFeed | None = None) -> None:
        self.engine = engine
        self.feed = feed or ChangeFeed()

    async def _notify(self, collection: str, op: str, doc_id: str) -> None:
        await self.feed.publish(collection, op, doc_id)

    # --- Players ---

    async def list_players(self) -> list[Player]:
        async with get_session(self.engine) as session:
            return await Repository(session).get_all_players()

    async def get_player(self, player_id: str) -> Player | None:
        async with get_session(self.engine) as session:
            return await Repository(session).get_player(player_id)

    async def save_player(self, player: Player) -> Player:
        """Upsert the complete player document."""
        async with get_session(self.engine) as session:
            saved = await Repository(session).upsert_player(player)
        await self._notify("players", "upsert", saved.id)
        return saved

    async def merge_player(self, player_id: str, fields: dict) -> Player | None:
        async with get_session(self.engine) as session:
            merged = await Repository(session).merge_player(player_id, fields)
        if merged is not None:
            await self._notify("players", "upsert", player_id)
        return merged

    async def delete_player(self, player_id: str) -> bool:
        async with get_session(self.engine) as session:
            deleted = await Repository(session).delete_player(player_id)
        if deleted:
            await self._notify("players", "delete", player_id)
        return deleted

    # --- Tournaments ---

    async def list_tournaments(self) -> list[TournamentRecord]:
        """Tournament history, most recent first."""
        async with get_session(self.engine) as session:
            return await Repository(session).get_all_tournaments()

    async def list_tournaments_chronological(self) -> list[TournamentRecord]:
        async with get_session(self.engine) as session:
            return await Repository(session).get_tournaments_chronological()

    async def get_tournament(self, tournament_id: str) -> TournamentRecord | None:
        async with get_session(self.engine) as session:
            return await Repository(session).get_tournament(tournament_id)

    async def create_tournament(self, record: TournamentRecord) -> TournamentRecord:
        """Insert a write-once tournament record."""
        async with get_session(self.engine) as session:
            saved = await Repository(session).create_tournament(record)
        await self._notify("tournaments", "create", saved.id)
        return saved

    async def restore_tournament(self, record: TournamentRecord) -> TournamentRecord:
        """Overwrite-or-create, used only when restoring a backup."""
        async with get_session(self.engine) as session:
            saved = await Repository(session).put_tournament(record)
        await self._notify("tournaments", "upsert", saved.id)
        return saved

    # --- Accounts ---

    async def list_accounts(self) -> list[Account]:
        async with get_session(self.engine) as session:
            return await Repository(session).get_all_accounts()

    async def get_account(self, account_id: str) -> Account | None:
        async with get_session(self.engine) as session:
            return await Repository(session).get_account(account_id)

    async def get_account_by_email(self, email: str) -> Account | None:
        async with get_session(self.engine) as session:
            return await Repository(session).get_account_by_email(email)

    async def get_accounts_for_player(self, player_id: str) -> list[Account]:
        async with get_session(self.engine) as session:
            return await Repository(session).get_accounts_for_player(player_id)

    async def save_account(self, account: Account) -> Account:
        async with get_session(self.engine) as session:
            saved = await Repository(session).upsert_account(account)
        await self._notify("accounts", "upsert", saved.id)
        return saved

"""Repository pattern for database access.

Wraps one SQLAlchemy async session and speaks in domain models: rows go in
and out as ``Player``, ``TournamentRecord`` and ``Account``. Tournament
records are write-once; ``put_tournament`` is reserved for backup restore.
"""

from __future__ import annotations

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fableague.core.errors import ImmutableRecordError
from fableague.db.models import AccountRow, PlayerRow, TournamentRow
from fableague.models.player import Account, Player
from fableague.models.tournament import TournamentRecord, TournamentResultEntry


_PLAYER_COLUMNS = frozenset(PlayerRow.__table__.columns.keys())


def player_from_row(row: PlayerRow) -> Player:
    return Player(
        id=row.id,
        name=row.name,
        hero_stats=dict(row.hero_stats or {}),
        tournaments_played=row.tournaments_played,
        total_wins=row.total_wins,
        total_points=row.total_points,
        recent_performance=list(row.recent_performance or []),
    )


def tournament_from_row(row: TournamentRow) -> TournamentRecord:
    return TournamentRecord(
        id=row.id,
        date=row.date,
        format=row.format,
        results=tuple(TournamentResultEntry.model_validate(r) for r in row.results or []),
    )


def account_from_row(row: AccountRow) -> Account:
    return Account(id=row.id, email=row.email, role=row.role, player_id=row.player_id)


class Repository:
    """Async repository for all database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # --- Players ---

    async def get_player(self, player_id: str) -> Player | None:
        row = await self.session.get(PlayerRow, player_id)
        return player_from_row(row) if row else None

    async def get_all_players(self) -> list[Player]:
        """Return every player in creation order."""
        stmt = select(PlayerRow).order_by(PlayerRow.created_at, PlayerRow.id)
        result = await self.session.execute(stmt)
        return [player_from_row(r) for r in result.scalars().all()]

    async def upsert_player(self, player: Player) -> Player:
        """Write the complete player document, creating it if needed."""
        row = await self.session.get(PlayerRow, player.id)
        if row is None:
            row = PlayerRow(id=player.id)
            self.session.add(row)
        row.name = player.name
        row.hero_stats = dict(player.hero_stats)
        row.tournaments_played = player.tournaments_played
        row.total_wins = player.total_wins
        row.total_points = player.total_points
        row.recent_performance = list(player.recent_performance)
        await self.session.flush()
        return player_from_row(row)

    async def merge_player(self, player_id: str, fields: dict) -> Player | None:
        """Set only the given fields on an existing player; others stay untouched.

        Returns None when the player does not exist.
        """
        row = await self.session.get(PlayerRow, player_id)
        if row is None:
            return None
        for key, value in fields.items():
            if key not in _PLAYER_COLUMNS or key == "id":
                raise ValueError(f"Unknown player field: {key}")
            setattr(row, key, value)
        await self.session.flush()
        return player_from_row(row)

    async def delete_player(self, player_id: str) -> bool:
        result = await self.session.execute(delete(PlayerRow).where(PlayerRow.id == player_id))
        return (result.rowcount or 0) > 0

    # --- Tournaments ---

    async def get_tournament(self, tournament_id: str) -> TournamentRecord | None:
        row = await self.session.get(TournamentRow, tournament_id)
        return tournament_from_row(row) if row else None

    async def get_all_tournaments(self) -> list[TournamentRecord]:
        """Return tournament history, most recent first."""
        stmt = select(TournamentRow).order_by(
            TournamentRow.date.desc(), TournamentRow.sequence.desc()
        )
        result = await self.session.execute(stmt)
        return [tournament_from_row(r) for r in result.scalars().all()]

    async def get_tournaments_chronological(self) -> list[TournamentRecord]:
        """Return tournament history oldest first (date, then commit order)."""
        stmt = select(TournamentRow).order_by(TournamentRow.date, TournamentRow.sequence)
        result = await self.session.execute(stmt)
        return [tournament_from_row(r) for r in result.scalars().all()]

    async def _next_sequence(self) -> int:
        result = await self.session.execute(select(func.max(TournamentRow.sequence)))
        current = result.scalar_one_or_none()
        return (current or 0) + 1

    async def create_tournament(self, record: TournamentRecord) -> TournamentRecord:
        """Insert a new tournament record. Existing ids are never overwritten."""
        if await self.session.get(TournamentRow, record.id) is not None:
            raise ImmutableRecordError(f"Tournament {record.id} already exists")
        row = TournamentRow(
            id=record.id,
            date=record.date,
            format=str(record.format),
            results=[r.to_document() for r in record.results],
            sequence=await self._next_sequence(),
        )
        self.session.add(row)
        await self.session.flush()
        return tournament_from_row(row)

    async def put_tournament(self, record: TournamentRecord) -> TournamentRecord:
        """Overwrite-or-create a tournament record (backup restore only)."""
        row = await self.session.get(TournamentRow, record.id)
        if row is None:
            row = TournamentRow(id=record.id, sequence=await self._next_sequence())
            self.session.add(row)
        row.date = record.date
        row.format = str(record.format)
        row.results = [r.to_document() for r in record.results]
        await self.session.flush()
        return tournament_from_row(row)

    # --- Accounts ---

    async def get_account(self, account_id: str) -> Account | None:
        row = await self.session.get(AccountRow, account_id)
        return account_from_row(row) if row else None

    async def get_account_by_email(self, email: str) -> Account | None:
        stmt = select(AccountRow).where(func.lower(AccountRow.email) == email.lower()).limit(1)
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()
        return account_from_row(row) if row else None

    async def get_accounts_for_player(self, player_id: str) -> list[Account]:
        stmt = select(AccountRow).where(AccountRow.player_id == player_id)
        result = await self.session.execute(stmt)
        return [account_from_row(r) for r in result.scalars().all()]

    async def get_all_accounts(self) -> list[Account]:
        stmt = select(AccountRow).order_by(AccountRow.created_at, AccountRow.id)
        result = await self.session.execute(stmt)
        return [account_from_row(r) for r in result.scalars().all()]

    async def upsert_account(self, account: Account) -> Account:
        row = await self.session.get(AccountRow, account.id)
        if row is None:
            row = AccountRow(id=account.id)
            self.session.add(row)
        row.email = account.email
        row.role = str(account.role)
        row.player_id = account.player_id
        await self.session.flush()
        return account_from_row(row)

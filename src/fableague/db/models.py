"""SQLAlchemy ORM models for the league database.

Three collections: players, tournaments, accounts (plus the identity
provider's credentials table). Each collection row is one document;
nested structures (hero histogram, performance history, tournament results)
are JSON columns so a document is always read and written whole.
"""

from __future__ import annotations

from datetime import UTC, datetime
from datetime import date as date_type

from sqlalchemy import Date, DateTime, Index, Integer, String
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class PlayerRow(Base):
    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    hero_stats: Mapped[dict] = mapped_column(JSON, default=dict)
    tournaments_played: Mapped[int] = mapped_column(Integer, default=0)
    total_wins: Mapped[int] = mapped_column(Integer, default=0)
    total_points: Mapped[int] = mapped_column(Integer, default=0)
    recent_performance: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )


class TournamentRow(Base):
    """Write-once tournament record. ``sequence`` orders same-day tournaments."""

    __tablename__ = "tournaments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    date: Mapped[date_type] = mapped_column(Date, nullable=False)
    format: Mapped[str] = mapped_column(String(20), nullable=False)
    results: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))

    __table_args__ = (
        Index("ix_tournaments_date", "date"),
        Index("ix_tournaments_format", "format"),
    )


class AccountRow(Base):
    """Login identity metadata. No credential column."""

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    role: Mapped[str] = mapped_column(String(10), nullable=False, default="PLAYER")
    player_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))

    __table_args__ = (
        Index("ix_accounts_player_id", "player_id"),
        Index("ix_accounts_email", "email"),
    )


class CredentialRow(Base):
    """Password hashes owned by the local identity provider.

    Kept apart from ``accounts``: nothing that reads or exports accounts ever
    touches this table.
    """

    __tablename__ = "credentials"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))

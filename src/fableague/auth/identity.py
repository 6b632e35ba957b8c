"""Identity provider contract and a local bcrypt-backed implementation.

The league never stores or sees password hashes: accounts only carry the
opaque user id the provider hands back. Swap ``LocalIdentityProvider`` for a
hosted service by implementing the same two methods.
"""

from __future__ import annotations

import logging
import uuid
from typing import Protocol

import bcrypt
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine

from fableague.core.errors import LeagueError
from fableague.db.engine import get_session
from fableague.db.models import CredentialRow

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


class IdentityError(LeagueError):
    """Registration refused by the identity provider."""


class IdentityProvider(Protocol):
    async def register(self, email: str, password: str) -> str:
        """Create a credential and return the new user id."""
        ...

    async def authenticate(self, email: str, password: str) -> str | None:
        """Return the user id for valid credentials, None otherwise."""
        ...


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def _check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise IdentityError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise IdentityError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")


class LocalIdentityProvider:
    """Email + password identities stored as bcrypt hashes in ``credentials``."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    async def register(self, email: str, password: str) -> str:
        email = email.strip()
        if "@" not in email:
            raise IdentityError(f"Invalid email address: {email!r}")
        _check_password(password)
        async with get_session(self.engine) as session:
            stmt = select(CredentialRow).where(func.lower(CredentialRow.email) == email.lower())
            if (await session.execute(stmt)).scalar_one_or_none() is not None:
                raise IdentityError(f"An identity already exists for {email}")
            user_id = str(uuid.uuid4())
            session.add(
                CredentialRow(user_id=user_id, email=email, password_hash=hash_password(password))
            )
        logger.info("identity_registered user_id=%s", user_id)
        return user_id

    async def authenticate(self, email: str, password: str) -> str | None:
        async with get_session(self.engine) as session:
            stmt = select(CredentialRow).where(
                func.lower(CredentialRow.email) == email.strip().lower()
            )
            row = (await session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        try:
            if verify_password(password, row.password_hash):
                return row.user_id
        except ValueError:
            logger.warning("identity_bad_hash user_id=%s", row.user_id)
        return None

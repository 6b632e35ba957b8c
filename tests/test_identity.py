"""Tests for the bcrypt-backed local identity provider."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine

from fableague.auth.identity import (
    IdentityError,
    LocalIdentityProvider,
    hash_password,
    verify_password,
)
from fableague.db.engine import get_session
from fableague.db.models import AccountRow, CredentialRow


@pytest.fixture
def identity(engine: AsyncEngine) -> LocalIdentityProvider:
    return LocalIdentityProvider(engine)


class TestPasswordHashing:
    def test_hash_is_not_plaintext(self):
        hashed = hash_password("hunter22")
        assert hashed != "hunter22"
        assert hashed.startswith("$2")
        assert verify_password("hunter22", hashed)
        assert not verify_password("hunter23", hashed)


class TestLocalIdentityProvider:
    async def test_register_then_authenticate(self, identity: LocalIdentityProvider):
        user_id = await identity.register("ana@example.com", "secret1")
        assert await identity.authenticate("ANA@example.com", "secret1") == user_id
        assert await identity.authenticate("ana@example.com", "wrong-pw") is None
        assert await identity.authenticate("nobody@example.com", "secret1") is None

    async def test_duplicate_email_rejected(self, identity: LocalIdentityProvider):
        await identity.register("ana@example.com", "secret1")
        with pytest.raises(IdentityError, match="already exists"):
            await identity.register("Ana@Example.com", "secret2")

    @pytest.mark.parametrize(
        ("email", "password"),
        [("not-an-email", "secret1"), ("ana@example.com", "short"), ("ana@example.com", "x" * 73)],
    )
    async def test_invalid_registration(
        self, identity: LocalIdentityProvider, email: str, password: str
    ):
        with pytest.raises(IdentityError):
            await identity.register(email, password)

    async def test_credentials_kept_apart_from_accounts(
        self, identity: LocalIdentityProvider, engine: AsyncEngine
    ):
        user_id = await identity.register("ana@example.com", "secret1")
        async with get_session(engine) as session:
            cred = await session.get(CredentialRow, user_id)
            accounts = (await session.execute(select(AccountRow))).scalars().all()
        assert cred is not None
        assert cred.password_hash != "secret1"
        assert accounts == []

"""Shared test fixtures."""

from collections.abc import AsyncGenerator, Callable

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from itsdangerous import URLSafeTimedSerializer
from sqlalchemy.ext.asyncio import AsyncEngine

from fableague.auth.deps import SESSION_COOKIE_NAME
from fableague.config import Settings
from fableague.core.change_feed import ChangeFeed
from fableague.db.engine import create_engine, init_schema
from fableague.db.store import LeagueStore
from fableague.main import attach_engine, create_app
from fableague.models.player import Account, Role


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(
        fableague_env="development",
        database_url="sqlite+aiosqlite:///:memory:",
        anthropic_api_key="",
        session_secret_key="test-secret-key-for-testing",
    )


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables."""
    eng = create_engine("sqlite+aiosqlite:///:memory:")
    await init_schema(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
async def store(engine: AsyncEngine) -> LeagueStore:
    return LeagueStore(engine, ChangeFeed())


@pytest.fixture
async def app(settings: Settings, engine: AsyncEngine) -> FastAPI:
    """App with lifespan startup done by hand (ASGITransport does not run it)."""
    application = create_app(settings)
    attach_engine(application, engine)
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def sign_session(secret: str, user_id: str, email: str) -> str:
    serializer = URLSafeTimedSerializer(secret, salt="fableague-session")
    return serializer.dumps({"user_id": user_id, "email": email})


@pytest.fixture
def login_as(app: FastAPI, settings: Settings) -> Callable:
    """Return an async helper that stores an account and yields its session headers."""

    async def _login(
        role: Role = Role.PLAYER, user_id: str = "u-admin", player_id: str | None = None
    ) -> dict[str, str]:
        email = f"{user_id}@example.com"
        await app.state.store.save_account(
            Account(id=user_id, email=email, role=role, player_id=player_id)
        )
        cookie = sign_session(settings.session_secret_key, user_id, email)
        return {"Cookie": f"{SESSION_COOKIE_NAME}={cookie}"}

    return _login

"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from fableague.api.backup import router as backup_router
from fableague.api.deps import register_error_handlers
from fableague.api.events import router as events_router
from fableague.api.oracle import router as oracle_router
from fableague.api.players import router as players_router
from fableague.api.standings import router as standings_router
from fableague.api.tournaments import router as tournaments_router
from fableague.auth.identity import LocalIdentityProvider
from fableague.auth.routes import router as auth_router
from fableague.config import Settings
from fableague.core.change_feed import ChangeFeed
from fableague.db.engine import create_engine, init_schema
from fableague.db.store import LeagueStore

logger = logging.getLogger(__name__)


def attach_engine(app: FastAPI, engine: AsyncEngine) -> LeagueStore:
    """Bind the store and identity provider for *engine* onto ``app.state``."""
    store = LeagueStore(engine, ChangeFeed())
    app.state.engine = engine
    app.state.store = store
    app.state.identity = LocalIdentityProvider(engine)
    return store


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: create engine and tables, wire the store."""
    settings: Settings = app.state.settings
    engine = create_engine(settings.database_url)
    await init_schema(engine)
    attach_engine(app, engine)
    logger.info("fableague_started env=%s", settings.fableague_env)

    yield

    await engine.dispose()
    logger.info("fableague_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the league FastAPI application."""
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.fableague_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="FaB League",
        version="0.1.0",
        description="Flesh and Blood league results, leaderboard and Oracle chat",
        docs_url="/docs" if not settings.is_production else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    register_error_handlers(app)

    app.include_router(auth_router)

    app.include_router(players_router)
    app.include_router(tournaments_router)
    app.include_router(standings_router)
    app.include_router(backup_router)
    app.include_router(oracle_router)
    app.include_router(events_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "env": settings.fableague_env}

    return app


app = create_app()

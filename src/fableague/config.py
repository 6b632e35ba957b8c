"""Application settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

import secrets

from pydantic import model_validator
from pydantic_settings import BaseSettings

DEFAULT_ORACLE_MODEL = "claude-sonnet-4-5-20250929"


class Settings(BaseSettings):
    """League application configuration.

    All values can be overridden via environment variables or .env file.
    """

    # External services
    anthropic_api_key: str = ""
    oracle_model: str = DEFAULT_ORACLE_MODEL

    # Sessions
    session_secret_key: str = ""

    # Database
    database_url: str = "sqlite+aiosqlite:///fableague.db"

    # Environment
    fableague_env: str = "development"

    # Scoring
    fableague_max_wins: int = 10  # upper bound on wins recorded for one tournament
    fableague_recent_window: int = 5  # tournaments shown as "recent form"

    # Logging
    fableague_log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _ensure_session_secret(self) -> Settings:
        """Auto-generate session secret in dev; reject missing secret in production."""
        if not self.session_secret_key:
            if self.fableague_env == "production":
                msg = (
                    "SESSION_SECRET_KEY must be set in production. "
                    "Generate one with: python -c "
                    '"import secrets; print(secrets.token_urlsafe(32))"'
                )
                raise ValueError(msg)
            self.session_secret_key = secrets.token_urlsafe(32)
        return self

    @model_validator(mode="after")
    def _check_scoring_bounds(self) -> Settings:
        if self.fableague_max_wins < 0:
            raise ValueError("FABLEAGUE_MAX_WINS must be non-negative")
        if self.fableague_recent_window < 1:
            raise ValueError("FABLEAGUE_RECENT_WINDOW must be at least 1")
        return self

    @property
    def is_production(self) -> bool:
        return self.fableague_env == "production"

"""
Runtime configuration, read once from the environment (and an optional .env file).
"""

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field

_ENV_PREFIX = "AKASHIC_"


class Settings(BaseModel):
    """Immutable application settings. Tests construct this directly."""

    model_config = {"frozen": True}

    database_url: str = Field(default="sqlite+aiosqlite:///./akashic.db", description="SQLAlchemy async URL")
    database_echo: bool = Field(default=False, description="Echo SQL statements to the log")

    welcome_bonus: int = Field(default=50, ge=0, description="Mana granted once at registration")
    oracle_cost: int = Field(default=5, ge=0, description="Mana charged per Oracle consultation")
    oracle_free_daily: int = Field(default=3, ge=0, description="Free daily Oracle consultations per anonymous session")

    session_ttl_hours: int = Field(default=168, gt=0, description="Lifetime of a login session")
    session_cookie: str = Field(default="akashic_session", description="Name of the session cookie")
    cookie_secure: bool = Field(default=False, description="Mark the session cookie as Secure")

    log_level: str = Field(default="INFO")
    seed_on_startup: bool = Field(default=True, description="Create tables and seed default data at startup")


def _env(name: str) -> str | None:
    return os.getenv(_ENV_PREFIX + name.upper())


def load_settings() -> Settings:
    """Builds Settings from AKASHIC_* environment variables, leaving unset keys at their defaults."""
    load_dotenv()
    values = {name: raw for name in Settings.model_fields if (raw := _env(name)) is not None}
    return Settings.model_validate(values)


@lru_cache
def get_settings() -> Settings:
    return load_settings()

"""Environment-driven runtime settings."""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_DB_PATH = Path("work/local/sight_story.db")
DEFAULT_PUBLIC_BASE_URL = "http://127.0.0.1:8000"
DEFAULT_CORS_ORIGINS = (
    "http://127.0.0.1:5173",
    "http://localhost:5173",
)


def int_env(name: str, default: int, *, minimum: int, maximum: int) -> int:
    """Read a bounded integer from the environment, falling back on bad input."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, min(maximum, value))


def resolve_db_path(db_path: Path | None) -> Path:
    """Resolve DB path from explicit arg, env var, then default path."""
    if db_path is not None:
        return db_path
    env_value = os.environ.get("SIGHT_STORY_DB_PATH", "").strip()
    if env_value:
        return Path(env_value)
    return DEFAULT_DB_PATH


def cors_origins() -> list[str]:
    raw = os.environ.get("SIGHT_STORY_CORS_ORIGINS", "").strip()
    if raw:
        return [origin.strip() for origin in raw.split(",") if origin.strip()]
    return list(DEFAULT_CORS_ORIGINS)


def token_ttl_hours() -> int:
    return int_env("SIGHT_STORY_TOKEN_TTL_HOURS", 24, minimum=1, maximum=24 * 30)


def public_base_url() -> str:
    raw = os.environ.get("SIGHT_STORY_PUBLIC_BASE_URL", "").strip()
    return (raw or DEFAULT_PUBLIC_BASE_URL).rstrip("/")

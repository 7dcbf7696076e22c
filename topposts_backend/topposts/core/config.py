from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Iterable

import topposts.core.runtime as runtime

logger = logging.getLogger(__name__)

DEFAULT_UPSTREAM_BASE_URL = "https://jsonplaceholder.typicode.com"
DEFAULT_CACHE_TTL_SECONDS = 15 * 60


def _env_int(name: str, default: int, positive: bool = False) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        value = None
    if value is None or (positive and value <= 0):
        logger.warning("invalid %s=%r, falling back to %d", name, raw, default)
        return default
    return value


def _env_float(name: str, default: float, positive: bool = False) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        value = None
    if value is None or (positive and value <= 0):
        logger.warning("invalid %s=%r, falling back to %s", name, raw, default)
        return default
    return value


def _env_flag(name: str) -> bool:
    return os.getenv(name, "0").strip().lower() in ("1", "true", "yes", "on")


def _cors_origins() -> list[str]:
    origins_env = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:3000")
    parts: Iterable[str] = (o.strip() for o in origins_env.split(","))
    return [o for o in parts if o]


@dataclass(slots=True)
class Settings:
    """Runtime settings, read from the environment once at startup."""

    upstream_base_url: str = DEFAULT_UPSTREAM_BASE_URL
    upstream_timeout_seconds: float = 10.0
    upstream_max_retries: int = 2
    upstream_retry_backoff_seconds: float = 0.5
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    cache_key_prefix: str = "topposts"
    redis_url: str = "redis://localhost:6379/0"
    use_fake_redis: bool = False
    # Lets the `random` request flag inflate comment counts. Keep off in production.
    enable_random_counts: bool = False
    cors_allow_origins: list[str] = field(default_factory=list)


def get_settings() -> Settings:
    """FastAPI DI hook: the settings loaded at startup, or fresh ones outside the app."""
    if runtime.settings is None:
        runtime.settings = load_settings()
    return runtime.settings


def load_settings() -> Settings:
    base_url = os.getenv("UPSTREAM_BASE_URL", DEFAULT_UPSTREAM_BASE_URL).strip()
    return Settings(
        upstream_base_url=base_url.rstrip("/") or DEFAULT_UPSTREAM_BASE_URL,
        upstream_timeout_seconds=_env_float("UPSTREAM_TIMEOUT_SECONDS", 10.0, positive=True),
        upstream_max_retries=max(0, _env_int("UPSTREAM_MAX_RETRIES", 2)),
        upstream_retry_backoff_seconds=_env_float("UPSTREAM_RETRY_BACKOFF_SECONDS", 0.5),
        cache_ttl_seconds=_env_int("CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS, positive=True),
        cache_key_prefix=os.getenv("CACHE_KEY_PREFIX", "topposts"),
        redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        use_fake_redis=_env_flag("USE_FAKE_REDIS"),
        enable_random_counts=_env_flag("ENABLE_RANDOM_COUNTS"),
        cors_allow_origins=_cors_origins(),
    )

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from beacon.errors import ConfigError

DEFAULT_PORT = 10000

_TRUTHY = ("1", "true", "yes", "on")

# Names accepted by both logging.setLevel and uvicorn.
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_LOG_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


def _normalize_origin(value: str) -> str:
    s = (value or "").strip()
    for q in ('"', "'"):
        if len(s) >= 2 and s.startswith(q) and s.endswith(q):
            s = s[1:-1]
        elif s.startswith(q):
            s = s[1:]
        elif s.endswith(q):
            s = s[:-1]
    return s.rstrip("/")


def parse_cors_origins(raw: Optional[str]) -> Tuple[str, ...]:
    """
    "https://a.com/, 'https://b.com'" -> ("https://a.com", "https://b.com")

    Empty tuple means any origin is allowed.
    """
    if not raw:
        return ()
    parts = (_normalize_origin(p) for p in raw.split(","))
    return tuple(p for p in parts if p)


def _database_url(raw: str) -> str:
    url = raw.strip()
    # Pin the psycopg2 driver; URLs that already name a driver are left alone.
    for scheme in ("postgres://", "postgresql://"):
        if url.startswith(scheme):
            return "postgresql+psycopg2://" + url[len(scheme):]
    return url


def _log_level(raw: Optional[str]) -> str:
    level = (raw or "INFO").strip().upper()
    level = _LOG_LEVEL_ALIASES.get(level, level)
    if level not in _LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got {raw!r}")
    return level


@dataclass(frozen=True)
class Settings:
    database_url: str
    pg_ssl: bool = False
    port: int = DEFAULT_PORT
    stats_token: Optional[str] = None
    cors_origins: Tuple[str, ...] = ()
    log_level: str = "INFO"
    debug_log_payloads: bool = False

    @property
    def host(self) -> str:
        return "0.0.0.0"

    @property
    def allow_any_origin(self) -> bool:
        return not self.cors_origins


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ

    db_url = (env.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise ConfigError(
            "Missing DATABASE_URL. Configure a Postgres database and set DATABASE_URL in environment variables."
        )

    raw_port = (env.get("PORT") or "").strip()
    try:
        port = int(raw_port) if raw_port else DEFAULT_PORT
    except ValueError:
        raise ConfigError(f"PORT must be an integer, got {raw_port!r}")

    token = env.get("STATS_TOKEN") or None

    return Settings(
        database_url=_database_url(db_url),
        pg_ssl=(env.get("PGSSL") or "").strip().lower() in ("true", "1"),
        port=port,
        stats_token=token,
        cors_origins=parse_cors_origins(env.get("CORS_ORIGIN")),
        log_level=_log_level(env.get("LOG_LEVEL")),
        debug_log_payloads=(env.get("BEACON_DEBUG_LOG_PAYLOADS") or "").strip().lower() in _TRUTHY,
    )

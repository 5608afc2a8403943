# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import quote_plus

DEFAULT_EVENTS_URL = "https://app.ticketmaster.com/discovery/v2/events.json"
DEFAULT_PORT = 3000
DEFAULT_SESSION_MAX_AGE = 28800  # 8 hours

_TRUTHY = {"1", "true", "yes", "y"}


def _flag(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def _database_url(env: Mapping[str, str]) -> str:
    url = (env.get("DATABASE_URL") or "").strip()
    if url:
        return url
    host = env.get("POSTGRES_HOST", "db")
    port = env.get("POSTGRES_PORT", "5432")
    name = env.get("POSTGRES_DB", "")
    user = quote_plus(env.get("POSTGRES_USER", ""))
    password = quote_plus(env.get("POSTGRES_PASSWORD", ""))
    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{name}"


@dataclass(frozen=True)
class Settings:
    database_url: str
    session_secret: str
    api_key: str = ""
    events_url: str = DEFAULT_EVENTS_URL
    events_keyword: str = "concert"
    events_page_size: int = 30
    session_max_age: int = DEFAULT_SESSION_MAX_AGE
    cookie_name: str = "eventgate_session"
    cookie_secure: bool = False
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    reload: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from the process environment (or an explicit mapping)."""
        env = os.environ if env is None else env
        secret = env.get("SESSION_SECRET")
        if not secret:
            raise RuntimeError("SESSION_SECRET is not set")
        return cls(
            database_url=_database_url(env),
            session_secret=secret,
            api_key=env.get("API_KEY", ""),
            events_url=env.get("EVENTGATE_EVENTS_URL", DEFAULT_EVENTS_URL),
            events_keyword=env.get("EVENTGATE_EVENTS_KEYWORD", "concert"),
            events_page_size=int(env.get("EVENTGATE_EVENTS_SIZE", "30")),
            session_max_age=int(env.get("EVENTGATE_SESSION_MAX_AGE", str(DEFAULT_SESSION_MAX_AGE))),
            cookie_name=env.get("EVENTGATE_COOKIE_NAME", "eventgate_session"),
            cookie_secure=_flag(env.get("EVENTGATE_COOKIE_SECURE")),
            host=env.get("EVENTGATE_HOST", "0.0.0.0"),
            port=int(env.get("EVENTGATE_PORT", str(DEFAULT_PORT))),
            reload=_flag(env.get("EVENTGATE_RELOAD")),
            log_level=env.get("EVENTGATE_LOG_LEVEL", "INFO").upper(),
        )

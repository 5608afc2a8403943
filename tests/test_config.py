import pytest

from eventgate.config import DEFAULT_EVENTS_URL, Settings


def test_from_env_builds_postgres_url():
    s = Settings.from_env(
        {
            "SESSION_SECRET": "x",
            "POSTGRES_DB": "users_db",
            "POSTGRES_USER": "postgres",
            "POSTGRES_PASSWORD": "p@ss",
            "API_KEY": "k",
        }
    )
    assert s.database_url == "postgresql+asyncpg://postgres:p%40ss@db:5432/users_db"
    assert s.api_key == "k"
    assert s.port == 3000
    assert s.events_url == DEFAULT_EVENTS_URL
    assert s.events_keyword == "concert"
    assert s.events_page_size == 30


def test_database_url_overrides_parts():
    s = Settings.from_env({"SESSION_SECRET": "x", "DATABASE_URL": "sqlite+aiosqlite:///./dev.db", "POSTGRES_DB": "ignored"})
    assert s.database_url == "sqlite+aiosqlite:///./dev.db"


def test_flags_and_ints():
    s = Settings.from_env(
        {"SESSION_SECRET": "x", "EVENTGATE_COOKIE_SECURE": "yes", "EVENTGATE_PORT": "8080", "EVENTGATE_LOG_LEVEL": "debug"}
    )
    assert s.cookie_secure is True
    assert s.port == 8080
    assert s.log_level == "DEBUG"


def test_missing_secret_fails_fast():
    with pytest.raises(RuntimeError):
        Settings.from_env({"POSTGRES_DB": "users_db"})


def test_only_session_secret_is_read():
    with pytest.raises(RuntimeError):
        Settings.from_env({"EVENTGATE_SECRET_KEY": "x"})

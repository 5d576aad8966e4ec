"""Unit tests for core.config module.

Tests cover:
- Settings model_validator checks (database URL required, SQLite only in debug)
- allowed_origins computed property with deduplication
- get_settings / clear_settings_cache lru_cache behavior
"""

import pytest
from pydantic import ValidationError

from core.config import Settings, clear_settings_cache, get_settings

PG_URL = "postgresql+asyncpg://localhost/db"


@pytest.fixture(autouse=True)
def _clear_settings():
    """Clear lru_cache between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()


# ---------------------------------------------------------------------------
# Settings validation
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestSettingsValidation:
    def test_debug_mode_allows_defaults(self):
        settings = Settings(database_url=PG_URL, debug=True)
        assert settings.debug is True
        assert settings.write_rate_limit == "30/minute"

    def test_requires_database_url(self):
        with pytest.raises(ValidationError, match="Database configuration"):
            Settings(debug=True, database_url="")

    def test_prod_rejects_sqlite(self):
        with pytest.raises(ValidationError, match="SQLite"):
            Settings(database_url="sqlite+aiosqlite:///catalog.db", debug=False)

    def test_debug_accepts_sqlite(self):
        settings = Settings(database_url="sqlite+aiosqlite:///:memory:", debug=True)
        assert settings.uses_sqlite is True

    def test_prod_accepts_postgres(self):
        settings = Settings(database_url=PG_URL, debug=False)
        assert settings.uses_sqlite is False


# ---------------------------------------------------------------------------
# allowed_origins
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestAllowedOrigins:
    def test_debug_includes_localhost(self):
        s = Settings(debug=True, database_url=PG_URL)
        assert "http://localhost:3000" in s.allowed_origins
        assert "http://localhost:8000" in s.allowed_origins

    def test_prod_excludes_localhost_dev_server(self):
        s = Settings(database_url=PG_URL, debug=False)
        assert "http://localhost:8000" not in s.allowed_origins

    def test_frontend_url_included(self):
        s = Settings(
            debug=True,
            database_url=PG_URL,
            frontend_url="https://app.example.com",
        )
        assert "https://app.example.com" in s.allowed_origins

    def test_cors_allowed_origins_csv_parsed(self):
        s = Settings(
            debug=True,
            database_url=PG_URL,
            cors_allowed_origins="https://a.com, https://b.com",
        )
        assert "https://a.com" in s.allowed_origins
        assert "https://b.com" in s.allowed_origins

    def test_deduplication(self):
        s = Settings(
            debug=True,
            database_url=PG_URL,
            cors_allowed_origins="http://localhost:3000,http://localhost:3000",
        )
        assert s.allowed_origins.count("http://localhost:3000") == 1


# ---------------------------------------------------------------------------
# get_settings / clear_settings_cache
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestGetSettings:
    def test_returns_same_instance(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://localhost/test")
        monkeypatch.setenv("DEBUG", "true")
        s1 = get_settings()
        s2 = get_settings()
        assert s1 is s2

    def test_clear_cache_resets(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://localhost/test")
        monkeypatch.setenv("DEBUG", "true")
        s1 = get_settings()
        clear_settings_cache()
        s2 = get_settings()
        assert s1 is not s2

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://localhost/test")
        monkeypatch.setenv("DEBUG", "false")
        monkeypatch.setenv("WRITE_RATE_LIMIT", "5/minute")

        settings = get_settings()

        assert settings.debug is False
        assert settings.write_rate_limit == "5/minute"

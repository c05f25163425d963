"""Tests for environment-driven settings."""

import pytest

from spendsync.config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults(monkeypatch):
    for name in (
        "SPENDSYNC_DB_PATH",
        "SPENDSYNC_DEBUG",
        "SPENDSYNC_RANGE_CACHE_TTL",
        "SPENDSYNC_MONTHLY_CACHE_TTL",
        "SPENDSYNC_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.database_path is None
    assert settings.debug is False
    assert settings.range_cache_ttl == 300
    assert settings.monthly_cache_ttl == 600
    assert settings.log_level == "WARNING"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SPENDSYNC_DB_PATH", "/tmp/ledger.db")
    monkeypatch.setenv("SPENDSYNC_DEBUG", "yes")
    monkeypatch.setenv("SPENDSYNC_RANGE_CACHE_TTL", "5")
    monkeypatch.setenv("SPENDSYNC_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.database_path == "/tmp/ledger.db"
    assert settings.debug is True
    assert settings.range_cache_ttl == 5
    assert settings.log_level == "DEBUG"

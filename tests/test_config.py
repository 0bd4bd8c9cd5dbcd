"""Settings — verifies environment-driven configuration.

Invariants:
    - PORT from the environment wins; unset or empty falls back to 5000
    - Non-numeric or out-of-range PORT fails validation at load time
    - postgresql:// URLs are rewritten for asyncpg
"""

import pytest
from pydantic import ValidationError

from movie_api.config import Settings, get_settings


def test_port_from_environment(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    assert Settings(_env_file=None).port == 8080


def test_port_defaults_to_5000(monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    assert Settings(_env_file=None).port == 5000


def test_empty_port_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("PORT", "")
    assert Settings(_env_file=None).port == 5000


@pytest.mark.parametrize("value", ["abc", "0", "70000"])
def test_invalid_port_rejected(monkeypatch, value):
    monkeypatch.setenv("PORT", value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_postgres_url_rewritten_for_asyncpg():
    settings = Settings(_env_file=None, database_url="postgresql://u:p@db:5432/movies")
    assert settings.database_url == "postgresql+asyncpg://u:p@db:5432/movies"


def test_cors_defaults_to_any_origin():
    assert Settings(_env_file=None).cors_origins == ["*"]


def test_get_settings_is_cached():
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()

from __future__ import annotations

from db_explorer import config
from db_explorer.infrastructure.db_factory import build_dsn

DEFAULT_PORT = 5432
DEFAULT_LIMIT = 5


def test_get_settings_defaults(monkeypatch):
    for var in ("DB_HOST", "DB_PORT", "DB_USER", "DB_SCHEMA", "DEFAULT_LIMIT", "DEFAULT_OFFSET"):
        monkeypatch.delenv(var, raising=False)
    config.get_settings.cache_clear()
    try:
        settings = config.get_settings()
        assert settings.db_host == "localhost"
        assert settings.db_port == DEFAULT_PORT
        assert settings.db_user == "postgres"
        assert settings.db_schema == "public"
        assert settings.default_offset == 0
        assert settings.default_limit == DEFAULT_LIMIT
        assert settings.passthrough_unrepresented is False
        assert settings.pool_min_size <= settings.pool_max_size
    finally:
        config.get_settings.cache_clear()


def test_settings_read_environment_aliases(monkeypatch):
    monkeypatch.setenv("DB_SCHEMA", "inventory")
    monkeypatch.setenv("DEFAULT_LIMIT", "20")
    monkeypatch.setenv("PASSTHROUGH_UNREPRESENTED", "true")

    settings = config.Settings()

    assert settings.db_schema == "inventory"
    assert settings.default_limit == 20
    assert settings.passthrough_unrepresented is True


def test_build_dsn_composes_connection_string():
    settings = config.Settings(
        db_host="db", db_port=6543, db_user="explorer", db_password="secret", db_name="shop"
    )
    assert build_dsn(settings) == "postgresql://explorer:secret@db:6543/shop"

from __future__ import annotations

import pytest

from aura.core.config import get_settings
from aura.repositories import build_store
from aura.repositories.json_storage import JsonFileStore
from aura.repositories.memory_store import MemoryStore
from aura.repositories.sql_repository import SQLStore


def test_defaults(monkeypatch):
    for name in ("PORT", "STORAGE_BACKEND", "REPORT_INTERVAL_SECONDS", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.port == 3000
    assert settings.storage_backend == "json"
    assert settings.report_interval_seconds == 3 * 24 * 60 * 60
    assert settings.cors_origins == ("*",)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("STORAGE_BACKEND", "SQL")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///x.db")
    monkeypatch.setenv("JSON_LEGACY_SILENT_DEFAULT", "yes")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    settings = get_settings()
    assert settings.port == 8080
    assert settings.storage_backend == "sql"
    assert settings.database_url == "sqlite:///x.db"
    assert settings.json_legacy_silent_default is True
    assert settings.cors_origins == ("http://a.test", "http://b.test")


def test_bad_port_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("PORT", "not-a-port")
    assert get_settings().port == 3000


def test_unknown_backend_is_rejected(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "redis")
    with pytest.raises(RuntimeError):
        get_settings()


def test_build_store_selects_adapter(monkeypatch, tmp_path):
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    assert isinstance(build_store(get_settings()), MemoryStore)

    get_settings.cache_clear()
    monkeypatch.setenv("STORAGE_BACKEND", "json")
    monkeypatch.setenv("DATA_FILE", str(tmp_path / "data.json"))
    store = build_store(get_settings())
    assert isinstance(store, JsonFileStore)
    assert store.path == tmp_path / "data.json"

    get_settings.cache_clear()
    monkeypatch.setenv("STORAGE_BACKEND", "sql")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'aura.db'}")
    sql_store = build_store(get_settings())
    try:
        assert isinstance(sql_store, SQLStore)
        assert sql_store.list("coaches") == []
    finally:
        sql_store.close()

"""
Configuration helpers for the AURA backend.

The Settings object reads environment variables (port, storage backend and
its connection string, SMTP, report schedule) so that routers/services do not
fetch os.environ directly.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_DATA_FILE = Path(__file__).resolve().parents[1] / "data.json"
STORAGE_BACKENDS = ("memory", "json", "mongo", "sql")


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str = "dev"
    port: int = 3000
    storage_backend: str = "json"
    data_file: str = str(DEFAULT_DATA_FILE)
    json_legacy_silent_default: bool = False
    database_url: str = ""
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "aura"
    smtp_host: str = ""
    smtp_port: int = 465
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = ""
    report_recipient: str = ""
    report_interval_seconds: int = 3 * 24 * 60 * 60
    report_enabled: bool = False
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = field(default_factory=lambda: ("*",))


def _int(value: str | None, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    backend = (os.getenv("STORAGE_BACKEND") or "json").strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise RuntimeError(
            f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)} (got {backend!r})."
        )
    origins = tuple(
        origin.strip() for origin in (os.getenv("CORS_ORIGINS") or "*").split(",") if origin.strip()
    )
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        port=_int(os.getenv("PORT", "3000"), 3000),
        storage_backend=backend,
        data_file=os.getenv("DATA_FILE") or str(DEFAULT_DATA_FILE),
        json_legacy_silent_default=_bool(os.getenv("JSON_LEGACY_SILENT_DEFAULT"), False),
        database_url=os.getenv("DATABASE_URL", ""),
        mongo_uri=os.getenv("MONGO_URI", "mongodb://localhost:27017"),
        mongo_db=os.getenv("MONGO_DB", "aura"),
        smtp_host=os.getenv("SMTP_HOST", ""),
        smtp_port=_int(os.getenv("SMTP_PORT", "465"), 465),
        smtp_user=os.getenv("SMTP_USER", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_from=os.getenv("SMTP_FROM", os.getenv("SMTP_USER", "")),
        report_recipient=os.getenv("REPORT_RECIPIENT", ""),
        report_interval_seconds=max(60, _int(os.getenv("REPORT_INTERVAL_SECONDS"), 3 * 24 * 60 * 60)),
        report_enabled=_bool(os.getenv("REPORT_ENABLED"), False),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        cors_origins=origins or ("*",),
    )

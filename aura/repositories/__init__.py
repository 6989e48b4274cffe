"""
Persistence adapters.

Every backend implements the ResourceStore contract from ``base``; routers and
services depend on that contract only. ``build_store`` picks the adapter named
by ``STORAGE_BACKEND``.
"""
from __future__ import annotations

from aura.core.config import Settings

from .base import NotFound, ResourceStore, StoreError, StoreUnavailable, ValidationError


def build_store(settings: Settings) -> ResourceStore:
    backend = settings.storage_backend
    if backend == "memory":
        from .memory_store import MemoryStore

        return MemoryStore()
    if backend == "json":
        from .json_storage import JsonFileStore

        return JsonFileStore(settings.data_file, legacy_silent_default=settings.json_legacy_silent_default)
    if backend == "mongo":
        from .mongo_store import MongoStore

        return MongoStore(settings.mongo_uri, settings.mongo_db)
    if backend == "sql":
        from .sql_repository import SQLStore

        return SQLStore(settings.database_url)
    raise RuntimeError(f"Unknown storage backend: {backend}")


__all__ = [
    "NotFound",
    "ResourceStore",
    "StoreError",
    "StoreUnavailable",
    "ValidationError",
    "build_store",
]

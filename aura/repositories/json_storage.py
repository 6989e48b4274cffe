"""
JSON-file persistence adapter.

The whole dataset lives in one document; every mutation re-reads and
rewrites it. A process-wide lock serializes the read-modify-write cycle and
the rewrite goes through a temp file + os.replace, so a write is either fully
visible or not at all.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from .base import (
    COLLECTIONS,
    NotFound,
    ResourceStore,
    StoreUnavailable,
    build_record,
    check_collection,
    merge_record,
    next_id,
    parse_id,
    sort_newest_first,
    utcnow_iso,
)

logger = logging.getLogger(__name__)

# One lock per resolved path: two stores on the same file share it.
_LOCKS: dict[str, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = str(path.resolve())
    with _LOCKS_GUARD:
        return _LOCKS.setdefault(key, threading.RLock())


def empty_document() -> dict:
    return {name: [] for name in COLLECTIONS} | {"sequences": {}}


def db_defaults(db: dict) -> dict:
    for name in COLLECTIONS:
        db.setdefault(name, [])
    db.setdefault("sequences", {})
    return db


class JsonFileStore(ResourceStore):
    backend_name = "json"

    def __init__(self, path: str | Path, *, legacy_silent_default: bool = False) -> None:
        self.path = Path(path)
        self.legacy_silent_default = legacy_silent_default
        self._lock = _lock_for(self.path)

    # -------------------------- file io --------------------------
    def load(self) -> dict:
        with self._lock:
            if not self.path.exists():
                db = empty_document()
                self.save(db)
                return db
            try:
                with self.path.open("r", encoding="utf-8") as f:
                    db = json.load(f)
                if not isinstance(db, dict):
                    raise ValueError("top-level JSON value is not an object")
            except (OSError, ValueError) as exc:
                if self.legacy_silent_default:
                    logger.warning("Unreadable data file %s (%s); using empty document", self.path, exc)
                    return empty_document()
                raise StoreUnavailable(f"Cannot read data file {self.path}: {exc}") from exc
            return db_defaults(db)

    def save(self, db: dict) -> None:
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(prefix=self.path.name, suffix=".tmp", dir=self.path.parent)
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        json.dump(db, f, ensure_ascii=False, indent=2)
                        f.flush()
                        os.fsync(f.fileno())
                    os.replace(tmp_name, self.path)
                except BaseException:
                    if os.path.exists(tmp_name):
                        os.unlink(tmp_name)
                    raise
            except OSError as exc:
                raise StoreUnavailable(f"Cannot write data file {self.path}: {exc}") from exc

    @staticmethod
    def _index_of(records: list[dict], key: int) -> int:
        for idx, record in enumerate(records):
            if record.get("id") == key:
                return idx
        return -1

    # -------------------------- store contract --------------------------
    def list(self, collection: str) -> list[dict]:
        check_collection(collection)
        return sort_newest_first(self.load()[collection])

    def get(self, collection: str, record_id: Any) -> dict:
        check_collection(collection)
        key = parse_id(record_id)
        records = self.load()[collection]
        idx = self._index_of(records, key)
        if idx < 0:
            raise NotFound(f"{collection}/{key} not found")
        return records[idx]

    def create(self, collection: str, fields: dict) -> dict:
        check_collection(collection)
        data = build_record(collection, fields)
        with self._lock:
            db = self.load()
            existing = [r["id"] for r in db[collection] if isinstance(r.get("id"), int)]
            last = max([db["sequences"].get(collection) or 0, *existing])
            new_id = next_id(last)
            record = {"id": new_id, **data, "created_at": utcnow_iso()}
            db[collection].append(record)
            db["sequences"][collection] = new_id
            self.save(db)
        return record

    def update(self, collection: str, record_id: Any, partial: dict) -> dict:
        check_collection(collection)
        key = parse_id(record_id)
        with self._lock:
            db = self.load()
            records = db[collection]
            idx = self._index_of(records, key)
            if idx < 0:
                raise NotFound(f"{collection}/{key} not found")
            merged = merge_record(collection, records[idx], partial)
            records[idx] = merged
            self.save(db)
        return merged

    def delete(self, collection: str, record_id: Any) -> None:
        check_collection(collection)
        key = parse_id(record_id)
        with self._lock:
            db = self.load()
            records = db[collection]
            idx = self._index_of(records, key)
            if idx < 0:
                raise NotFound(f"{collection}/{key} not found")
            del records[idx]
            self.save(db)

"""Volatile in-process backend, reset on restart. Used for tests and demos."""
from __future__ import annotations

import copy
import threading
from typing import Any

from .base import (
    COLLECTIONS,
    NotFound,
    ResourceStore,
    build_record,
    check_collection,
    merge_record,
    next_id,
    parse_id,
    sort_newest_first,
    utcnow_iso,
)


class MemoryStore(ResourceStore):
    backend_name = "memory"

    def __init__(self) -> None:
        self._data: dict[str, dict[int, dict]] = {name: {} for name in COLLECTIONS}
        self._last_id = 0
        self._lock = threading.Lock()

    def list(self, collection: str) -> list[dict]:
        check_collection(collection)
        with self._lock:
            records = [copy.deepcopy(r) for r in self._data[collection].values()]
        return sort_newest_first(records)

    def get(self, collection: str, record_id: Any) -> dict:
        check_collection(collection)
        key = parse_id(record_id)
        with self._lock:
            record = self._data[collection].get(key)
            if record is None:
                raise NotFound(f"{collection}/{key} not found")
            return copy.deepcopy(record)

    def create(self, collection: str, fields: dict) -> dict:
        check_collection(collection)
        data = copy.deepcopy(build_record(collection, fields))
        with self._lock:
            self._last_id = next_id(self._last_id)
            record = {"id": self._last_id, **data, "created_at": utcnow_iso()}
            self._data[collection][record["id"]] = record
            return copy.deepcopy(record)

    def update(self, collection: str, record_id: Any, partial: dict) -> dict:
        check_collection(collection)
        key = parse_id(record_id)
        with self._lock:
            current = self._data[collection].get(key)
            if current is None:
                raise NotFound(f"{collection}/{key} not found")
            merged = merge_record(collection, current, copy.deepcopy(partial))
            self._data[collection][key] = merged
            return copy.deepcopy(merged)

    def delete(self, collection: str, record_id: Any) -> None:
        check_collection(collection)
        key = parse_id(record_id)
        with self._lock:
            if self._data[collection].pop(key, None) is None:
                raise NotFound(f"{collection}/{key} not found")

"""Resource store contract shared by every persistence backend."""
from __future__ import annotations

import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

COLLECTIONS = ("applications", "students", "coaches", "lessons")

REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    "applications": ("name", "surname", "age", "country", "rank", "targetRank"),
    "students": ("name", "surname"),
    "coaches": ("name", "surname"),
    "lessons": (),
}

# Keys owned by the store; client-supplied values are ignored.
RESERVED_FIELDS = ("id", "created_at")


class StoreError(Exception):
    """Base exception for resource store operations."""


class ValidationError(StoreError):
    """Raised when a payload is missing required fields or is malformed."""


class NotFound(StoreError):
    """Raised when the requested id does not exist in the collection."""


class StoreUnavailable(StoreError):
    """Raised when the backend cannot be reached or read."""


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def now_ms() -> int:
    return int(time.time() * 1000)


def next_id(last: int | None) -> int:
    """Timestamp-derived id, strictly greater than the last id handed out."""
    return max(now_ms(), int(last or 0) + 1)


def check_collection(collection: str) -> str:
    if collection not in COLLECTIONS:
        raise ValidationError(f"Unknown collection: {collection}")
    return collection


def parse_id(record_id: Any) -> int:
    """Ids are positive integers; anything else cannot exist."""
    if isinstance(record_id, bool):
        raise NotFound(f"Record {record_id!r} not found")
    try:
        value = int(record_id)
    except (TypeError, ValueError):
        raise NotFound(f"Record {record_id!r} not found") from None
    if value <= 0:
        raise NotFound(f"Record {record_id!r} not found")
    return value


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def validate_required(collection: str, record: dict) -> None:
    missing = [key for key in REQUIRED_FIELDS[collection] if _is_missing(record.get(key))]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def clean_fields(fields: Any) -> dict:
    """Copy a payload, dropping store-owned keys."""
    if not isinstance(fields, dict):
        raise ValidationError("Request body must be a JSON object")
    return {key: value for key, value in fields.items() if key not in RESERVED_FIELDS}


def apply_defaults(collection: str, fields: dict) -> dict:
    if collection == "applications":
        fields.setdefault("read", False)
    elif collection == "students":
        if fields.get("schedule") is None:
            fields["schedule"] = {}
    return fields


def build_record(collection: str, fields: Any) -> dict:
    """Validated, defaulted copy of a creation payload (without id/created_at)."""
    data = apply_defaults(collection, clean_fields(fields))
    validate_required(collection, data)
    return data


def merge_record(collection: str, current: dict, partial: Any) -> dict:
    """Shallow merge: keys in partial overwrite, everything else is retained."""
    merged = dict(current)
    merged.update(clean_fields(partial))
    validate_required(collection, merged)
    return merged


def _id_sort_key(value: Any) -> int:
    # Hand-edited files may carry ids that are not numbers; they sort last.
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def sort_newest_first(records: list[dict]) -> list[dict]:
    return sorted(
        records,
        key=lambda r: (str(r.get("created_at") or ""), _id_sort_key(r.get("id"))),
        reverse=True,
    )


class ResourceStore(ABC):
    """Uniform CRUD contract over a named collection, whatever the backend."""

    backend_name = "abstract"

    @abstractmethod
    def list(self, collection: str) -> list[dict]:
        """All records of the collection, newest first."""

    @abstractmethod
    def get(self, collection: str, record_id: Any) -> dict:
        """Single record or NotFound."""

    @abstractmethod
    def create(self, collection: str, fields: dict) -> dict:
        """Assign id and created_at, persist and return the stored record."""

    @abstractmethod
    def update(self, collection: str, record_id: Any, partial: dict) -> dict:
        """Shallow-merge partial onto the record and return the result."""

    @abstractmethod
    def delete(self, collection: str, record_id: Any) -> None:
        """Remove the record or raise NotFound."""

    def mark_read(self, record_id: Any, collection: str = "applications") -> dict:
        return self.update(collection, record_id, {"read": True})

    def close(self) -> None:
        """Release backend resources."""

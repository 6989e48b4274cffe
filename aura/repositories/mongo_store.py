"""Document-store backend on MongoDB (pymongo)."""
from __future__ import annotations

from typing import Any

from pymongo import DESCENDING, MongoClient, ReturnDocument
from pymongo.errors import PyMongoError

from .base import (
    NotFound,
    ResourceStore,
    StoreUnavailable,
    build_record,
    check_collection,
    clean_fields,
    parse_id,
    utcnow_iso,
    validate_required,
)


COUNTERS = "counters"


def _to_record(document: dict) -> dict:
    record = {"id": document["_id"]}
    record.update((key, value) for key, value in document.items() if key != "_id")
    return record


class MongoStore(ResourceStore):
    """One Mongo collection per resource; ids come from an atomic counter."""

    backend_name = "mongo"

    def __init__(self, uri: str = "", db_name: str = "aura", *, client: MongoClient | None = None,
                 timeout_ms: int = 5000) -> None:
        self._owns_client = client is None
        self.client = client or MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
        self.db = self.client[db_name]

    def _next_id(self, collection: str) -> int:
        counter = self.db[COUNTERS].find_one_and_update(
            {"_id": collection},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["seq"])

    def list(self, collection: str) -> list[dict]:
        check_collection(collection)
        try:
            cursor = self.db[collection].find().sort([("created_at", DESCENDING), ("_id", DESCENDING)])
            return [_to_record(doc) for doc in cursor]
        except PyMongoError as exc:
            raise StoreUnavailable(f"MongoDB unavailable: {exc}") from exc

    def get(self, collection: str, record_id: Any) -> dict:
        check_collection(collection)
        key = parse_id(record_id)
        try:
            document = self.db[collection].find_one({"_id": key})
        except PyMongoError as exc:
            raise StoreUnavailable(f"MongoDB unavailable: {exc}") from exc
        if document is None:
            raise NotFound(f"{collection}/{key} not found")
        return _to_record(document)

    def create(self, collection: str, fields: dict) -> dict:
        check_collection(collection)
        data = build_record(collection, fields)
        try:
            document = {"_id": self._next_id(collection), **data, "created_at": utcnow_iso()}
            self.db[collection].insert_one(document)
        except PyMongoError as exc:
            raise StoreUnavailable(f"MongoDB unavailable: {exc}") from exc
        return _to_record(document)

    def update(self, collection: str, record_id: Any, partial: dict) -> dict:
        check_collection(collection)
        key = parse_id(record_id)
        changes = clean_fields(partial)
        current = self.get(collection, key)
        validate_required(collection, {**current, **changes})
        if not changes:
            return current
        try:
            document = self.db[collection].find_one_and_update(
                {"_id": key},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            raise StoreUnavailable(f"MongoDB unavailable: {exc}") from exc
        if document is None:
            raise NotFound(f"{collection}/{key} not found")
        return _to_record(document)

    def delete(self, collection: str, record_id: Any) -> None:
        check_collection(collection)
        key = parse_id(record_id)
        try:
            document = self.db[collection].find_one_and_delete({"_id": key})
        except PyMongoError as exc:
            raise StoreUnavailable(f"MongoDB unavailable: {exc}") from exc
        if document is None:
            raise NotFound(f"{collection}/{key} not found")

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

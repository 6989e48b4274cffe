"""Relational backend on SQLAlchemy: one table per collection."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select, text, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import TextClause

from aura.db.create_tables import create_all
from aura.db.models import MODELS
from aura.db.session import create_db_engine, make_sessionmaker, session_scope

from .base import (
    NotFound,
    ResourceStore,
    StoreUnavailable,
    build_record,
    check_collection,
    merge_record,
    parse_id,
)

logger = logging.getLogger(__name__)


def _fits(kind: type, value: Any) -> bool:
    if kind is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, kind)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, str) and value:
        try:
            return _aware(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            pass
    return datetime.now(timezone.utc)


def _columns_from(model, record: dict) -> dict:
    """Split a wire record into column values plus the ``extra`` bag."""
    values: dict = {}
    extra: dict = {}
    for key, value in record.items():
        if key in ("id", "created_at"):
            continue
        column = model.wire_fields.get(key)
        if column and _fits(column[1], value):
            values[column[0]] = value
        else:
            # unknown keys, mistyped values and explicit nulls
            extra[key] = value
    for key, (attr, _kind) in model.wire_fields.items():
        if key in extra or key not in record:
            values.setdefault(attr, None)
    if "read" in model.wire_fields and values.get("read") is None:
        values["read"] = False
    if "schedule" in model.wire_fields and values.get("schedule") is None:
        values["schedule"] = {}
    values["extra"] = extra
    return values


def sequence_reset_statement(table: str) -> TextClause:
    """setval so the next generated id follows the highest stored one.

    ``table`` always comes from the model registry, never from request data.
    """
    return text(
        "SELECT setval(pg_get_serial_sequence(:table, 'id'), "
        f"COALESCE((SELECT MAX(id) FROM {table}), 0) + 1, false)"
    )


def _to_record(entity) -> dict:
    record: dict = {"id": entity.id}
    for key, (attr, _kind) in entity.wire_fields.items():
        value = getattr(entity, attr)
        if value is not None:
            record[key] = value
    record.update(entity.extra or {})
    record["created_at"] = _aware(entity.created_at).isoformat()
    return record


class SQLStore(ResourceStore):
    """CRUD over SQLAlchemy sessions; every statement uses bound parameters."""

    backend_name = "sql"

    def __init__(self, url: str | None = None, *, engine: Engine | None = None, create_schema: bool = True) -> None:
        self._owns_engine = engine is None
        self.engine = engine or create_db_engine(url)
        self._sessions = make_sessionmaker(self.engine)
        if create_schema:
            try:
                create_all(self.engine)
            except SQLAlchemyError as exc:
                raise StoreUnavailable(f"Database unavailable: {exc}") from exc

    def list(self, collection: str) -> list[dict]:
        model = MODELS[check_collection(collection)]
        try:
            with session_scope(self._sessions) as session:
                stmt = select(model).order_by(model.created_at.desc(), model.id.desc())
                return [_to_record(entity) for entity in session.execute(stmt).scalars().all()]
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Database unavailable: {exc}") from exc

    def get(self, collection: str, record_id: Any) -> dict:
        model = MODELS[check_collection(collection)]
        key = parse_id(record_id)
        try:
            with session_scope(self._sessions) as session:
                entity = session.get(model, key)
                if entity is None:
                    raise NotFound(f"{collection}/{key} not found")
                return _to_record(entity)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Database unavailable: {exc}") from exc

    def create(self, collection: str, fields: dict) -> dict:
        model = MODELS[check_collection(collection)]
        data = build_record(collection, fields)
        entity = model(**_columns_from(model, data), created_at=datetime.now(timezone.utc))
        try:
            with session_scope(self._sessions) as session:
                session.add(entity)
                session.commit()
                session.refresh(entity)
                return _to_record(entity)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Database unavailable: {exc}") from exc

    def update(self, collection: str, record_id: Any, partial: dict) -> dict:
        model = MODELS[check_collection(collection)]
        key = parse_id(record_id)
        try:
            with session_scope(self._sessions) as session:
                entity = session.get(model, key)
                if entity is None:
                    raise NotFound(f"{collection}/{key} not found")
                merged = merge_record(collection, _to_record(entity), partial)
                session.execute(
                    update(model).where(model.id == key).values(**_columns_from(model, merged))
                )
                session.commit()
                session.refresh(entity)
                return _to_record(entity)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Database unavailable: {exc}") from exc

    def delete(self, collection: str, record_id: Any) -> None:
        model = MODELS[check_collection(collection)]
        key = parse_id(record_id)
        try:
            with session_scope(self._sessions) as session:
                result = session.execute(delete(model).where(model.id == key))
                session.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Database unavailable: {exc}") from exc
        if not result.rowcount:
            raise NotFound(f"{collection}/{key} not found")

    def import_record(self, collection: str, record: dict) -> dict:
        """Insert or overwrite a record keeping its id and created_at (used by the JSON import)."""
        model = MODELS[check_collection(collection)]
        key = parse_id(record.get("id"))
        created_at = _parse_timestamp(record.get("created_at") or record.get("registration_date"))
        fields = {k: v for k, v in record.items() if k != "registration_date"}
        entity = model(id=key, **_columns_from(model, fields), created_at=created_at)
        try:
            with session_scope(self._sessions) as session:
                entity = session.merge(entity)
                session.commit()
                return _to_record(entity)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Database unavailable: {exc}") from exc

    def reset_sequences(self) -> list[str]:
        """Move PostgreSQL id sequences past imported ids; returns the tables touched."""
        if self.engine.dialect.name != "postgresql":
            return []
        tables = [model.__tablename__ for model in MODELS.values()]
        try:
            with session_scope(self._sessions) as session:
                for table in tables:
                    session.execute(sequence_reset_statement(table), {"table": table})
                session.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Database unavailable: {exc}") from exc
        return tables

    def close(self) -> None:
        if self._owns_engine:
            logger.info("Disposing SQL engine")
            self.engine.dispose()

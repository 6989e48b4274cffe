"""
SQL backend specifics against a temporary SQLite database.
"""
from __future__ import annotations

import pytest
from sqlalchemy import select

from aura.db.models import Lesson, Student
from aura.db.session import session_scope
from aura.repositories.base import StoreUnavailable
from aura.repositories.sql_repository import SQLStore, sequence_reset_statement


@pytest.fixture()
def temp_db(tmp_path):
    """SQLStore on a temp SQLite file; the engine is disposed so the file is not left locked on Windows."""
    db_file = tmp_path / "test.db"
    repo = SQLStore(f"sqlite:///{db_file}")
    yield repo
    repo.close()


def test_known_fields_land_in_typed_columns(temp_db, student_payload):
    record = temp_db.create("students", student_payload)
    with session_scope(temp_db._sessions) as session:
        entity = session.get(Student, record["id"])
        assert entity.target_rank == "Platinum"
        assert entity.profile_image == "/uploads/grace.png"
        assert entity.schedule["monday"][0]["coachId"] == 7
        assert entity.extra == {}


def test_unknown_or_mistyped_values_go_to_extra(temp_db):
    record = temp_db.create("students", {"name": "Lin", "surname": "Wei", "age": "twenty", "nickname": "lw"})
    assert record["age"] == "twenty"
    assert record["nickname"] == "lw"
    with session_scope(temp_db._sessions) as session:
        entity = session.get(Student, record["id"])
        assert entity.age is None
        assert entity.extra == {"age": "twenty", "nickname": "lw"}

    updated = temp_db.update("students", record["id"], {"age": 21})
    assert updated["age"] == 21
    with session_scope(temp_db._sessions) as session:
        entity = session.get(Student, record["id"])
        assert entity.age == 21
        assert entity.extra == {"nickname": "lw"}


def test_import_record_keeps_id_and_timestamp(temp_db):
    legacy = {"id": 1712345678901, "notes": "imported", "created_at": "2024-04-05T19:34:38.901000Z"}
    record = temp_db.import_record("lessons", legacy)
    assert record["id"] == 1712345678901
    assert record["created_at"].startswith("2024-04-05T19:34:38.901")

    again = temp_db.import_record("lessons", {**legacy, "notes": "imported twice"})
    assert again["notes"] == "imported twice"
    with session_scope(temp_db._sessions) as session:
        assert len(session.execute(select(Lesson)).scalars().all()) == 1


def test_import_record_accepts_registration_date(temp_db):
    record = temp_db.import_record(
        "students",
        {"id": 5, "name": "Old", "surname": "Student", "registration_date": "2023-01-02T03:04:05+00:00"},
    )
    assert record["created_at"] == "2023-01-02T03:04:05+00:00"
    assert "registration_date" not in record


def test_unreachable_database_is_store_unavailable(tmp_path):
    missing_dir = tmp_path / "does-not-exist" / "db.sqlite"
    with pytest.raises(StoreUnavailable):
        SQLStore(f"sqlite:///{missing_dir}")


def test_missing_database_url_is_rejected():
    with pytest.raises(RuntimeError):
        SQLStore("")


def test_deleted_newest_id_is_not_reused(temp_db):
    temp_db.create("coaches", {"name": "A", "surname": "One"})
    newest = temp_db.create("coaches", {"name": "B", "surname": "Two"})
    temp_db.delete("coaches", newest["id"])

    again = temp_db.create("coaches", {"name": "C", "surname": "Three"})
    assert again["id"] > newest["id"]


def test_imported_ids_advance_the_sqlite_sequence(temp_db):
    temp_db.import_record("lessons", {"id": 500, "notes": "imported"})
    assert temp_db.create("lessons", {"notes": "new"})["id"] > 500


def test_null_typed_values_are_kept_in_extra(temp_db):
    record = temp_db.create("students", {"name": "Lin", "surname": "Wei", "age": None})
    with session_scope(temp_db._sessions) as session:
        entity = session.get(Student, record["id"])
        assert entity.age is None
        assert entity.extra == {"age": None}


def test_sequence_reset_is_postgres_only(temp_db):
    assert temp_db.reset_sequences() == []


def test_sequence_reset_statement_binds_table_name():
    stmt = sequence_reset_statement("coaches")
    sql = str(stmt)
    assert "setval(pg_get_serial_sequence(:table, 'id')" in sql
    assert "MAX(id) FROM coaches" in sql

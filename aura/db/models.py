"""SQLAlchemy models for the four resource tables.

Each model maps wire (camelCase) keys to typed columns through ``wire_fields``;
keys with no column, or whose value does not fit the column type, are kept in
the ``extra`` JSON column so records round-trip unchanged.
"""
from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, JSON, String, Text

from .session import Base

# Millisecond ids from the JSON backend overflow a 32-bit INTEGER; SQLite needs plain
# INTEGER PRIMARY KEY AUTOINCREMENT, so deleted ids are never handed out again.
IdType = BigInteger().with_variant(Integer, "sqlite")

_PERSONAL_FIELDS = {
    "name": ("name", str),
    "surname": ("surname", str),
    "age": ("age", int),
    "country": ("country", str),
    "rank": ("rank", str),
    "targetRank": ("target_rank", str),
    "trackerUrl": ("tracker_url", str),
    "expectations": ("expectations", str),
    "introduction": ("introduction", str),
    "discord": ("discord", str),
}


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=True)
    surname = Column(String(120), nullable=True)
    age = Column(Integer, nullable=True)
    country = Column(String(120), nullable=True)
    rank = Column(String(64), nullable=True)
    target_rank = Column(String(64), nullable=True)
    tracker_url = Column(Text, nullable=True)
    expectations = Column(Text, nullable=True)
    introduction = Column(Text, nullable=True)
    discord = Column(String(120), nullable=True)
    read = Column(Boolean, default=False, nullable=False)
    extra = Column(JSON, default=dict, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    wire_fields = {**_PERSONAL_FIELDS, "read": ("read", bool)}


class Student(Base):
    __tablename__ = "students"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=True)
    surname = Column(String(120), nullable=True)
    age = Column(Integer, nullable=True)
    country = Column(String(120), nullable=True)
    rank = Column(String(64), nullable=True)
    target_rank = Column(String(64), nullable=True)
    tracker_url = Column(Text, nullable=True)
    expectations = Column(Text, nullable=True)
    introduction = Column(Text, nullable=True)
    discord = Column(String(120), nullable=True)
    schedule = Column(JSON, default=dict, nullable=False)
    profile_image = Column(Text, nullable=True)
    extra = Column(JSON, default=dict, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    wire_fields = {
        **_PERSONAL_FIELDS,
        "schedule": ("schedule", dict),
        "profileImage": ("profile_image", str),
    }


class Coach(Base):
    __tablename__ = "coaches"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(IdType, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=True)
    surname = Column(String(120), nullable=True)
    specialty = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)
    discord = Column(String(120), nullable=True)
    extra = Column(JSON, default=dict, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    wire_fields = {
        "name": ("name", str),
        "surname": ("surname", str),
        "specialty": ("specialty", str),
        "email": ("email", str),
        "phone": ("phone", str),
        "discord": ("discord", str),
    }


class Lesson(Base):
    __tablename__ = "lessons"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(IdType, primary_key=True, autoincrement=True)
    date = Column(String(32), nullable=True)
    time = Column(String(16), nullable=True)
    type = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)
    extra = Column(JSON, default=dict, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)

    wire_fields = {
        "date": ("date", str),
        "time": ("time", str),
        "type": ("type", str),
        "notes": ("notes", str),
    }


MODELS = {
    "applications": Application,
    "students": Student,
    "coaches": Coach,
    "lessons": Lesson,
}

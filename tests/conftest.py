from __future__ import annotations

import sys
from pathlib import Path

import mongomock
import pytest

# Make the aura package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from aura.core import config as core_config  # noqa: E402
from aura.repositories.json_storage import JsonFileStore  # noqa: E402
from aura.repositories.memory_store import MemoryStore  # noqa: E402
from aura.repositories.mongo_store import MongoStore  # noqa: E402
from aura.repositories.sql_repository import SQLStore  # noqa: E402

BACKENDS = ["memory", "json", "sql", "mongo"]


def make_store(backend: str, tmp_path: Path):
    if backend == "memory":
        return MemoryStore()
    if backend == "json":
        return JsonFileStore(tmp_path / "data.json")
    if backend == "sql":
        return SQLStore(f"sqlite:///{tmp_path / 'test.db'}")
    if backend == "mongo":
        return MongoStore(client=mongomock.MongoClient(), db_name="aura_test")
    raise ValueError(backend)


@pytest.fixture(params=BACKENDS)
def store(request, tmp_path):
    """The same contract tests run against every backend."""
    instance = make_store(request.param, tmp_path)
    yield instance
    instance.close()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    core_config.get_settings.cache_clear()
    yield
    core_config.get_settings.cache_clear()


@pytest.fixture()
def application_payload() -> dict:
    return {
        "name": "Ada",
        "surname": "Lovelace",
        "age": 28,
        "country": "UK",
        "rank": "Gold",
        "targetRank": "Diamond",
        "discord": "ada#1815",
    }


@pytest.fixture()
def student_payload() -> dict:
    return {
        "name": "Grace",
        "surname": "Hopper",
        "age": 31,
        "country": "US",
        "rank": "Silver",
        "targetRank": "Platinum",
        "schedule": {
            "monday": [{"time": "18:00", "duration": 60, "type": "vod-review", "coachId": 7}],
            "thursday": [{"time": "20:00", "duration": 90, "type": "live", "coachId": 7}],
        },
        "profileImage": "/uploads/grace.png",
    }

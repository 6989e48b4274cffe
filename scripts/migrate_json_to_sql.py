"""One-off migration script: JSON data file -> SQL backend (DATABASE_URL)."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Make the aura package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from aura.core.config import get_settings  # noqa: E402
from aura.repositories.base import COLLECTIONS  # noqa: E402
from aura.repositories.json_storage import JsonFileStore  # noqa: E402
from aura.repositories.sql_repository import SQLStore  # noqa: E402


def migrate(data_file: str, database_url: str) -> dict[str, int]:
    source = JsonFileStore(data_file)
    target = SQLStore(database_url)
    counts: dict[str, int] = {}
    try:
        db = source.load()
        for collection in COLLECTIONS:
            for record in db[collection]:
                target.import_record(collection, record)
            counts[collection] = len(db[collection])
        target.reset_sequences()
    finally:
        target.close()
    return counts


if __name__ == "__main__":
    settings = get_settings()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--data-file", default=settings.data_file)
    parser.add_argument("--database-url", default=settings.database_url)
    args = parser.parse_args()
    if not Path(args.data_file).exists():
        raise SystemExit(f"File not found: {args.data_file}")
    result = migrate(args.data_file, args.database_url)
    for name, count in result.items():
        print(f"{name}: {count} records migrated")

"""Storage factory functions for creating key/value store instances."""

import os
from pathlib import Path
from typing import Optional

from dentrack.storage.sqlalchemy_store import DEFAULT_CAPACITY_BYTES, SQLAlchemyKeyValueStore


def create_sqlite_store(
    database_path: Optional[str] = None, capacity_bytes: Optional[int] = None
) -> SQLAlchemyKeyValueStore:
    """Create a SQLite-backed key/value store.

    Args:
        database_path: Path to SQLite database file. If None, checks DENTRACK_DB_PATH
            environment variable, then defaults to ~/.dentrack/dentrack.db
        capacity_bytes: Hard storage capacity. If None, checks DENTRACK_CAPACITY_BYTES
            environment variable, then defaults to 5 MiB

    Returns:
        SQLAlchemyKeyValueStore instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("DENTRACK_DB_PATH")

    if database_path is None:
        # Default to ~/.dentrack/dentrack.db
        home = Path.home()
        db_dir = home / ".dentrack"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "dentrack.db")

    if capacity_bytes is None:
        env_capacity = os.environ.get("DENTRACK_CAPACITY_BYTES")
        capacity_bytes = int(env_capacity) if env_capacity else DEFAULT_CAPACITY_BYTES

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyKeyValueStore(database_url, capacity_bytes=capacity_bytes)

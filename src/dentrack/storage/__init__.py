"""Storage layer for dentrack application."""

from dentrack.storage.base import KeyValueStore
from dentrack.storage.factories import create_sqlite_store

__all__ = ["KeyValueStore", "create_sqlite_store"]

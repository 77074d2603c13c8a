"""SQLAlchemy key/value store implementation."""

import logging
from typing import Mapping, Optional
from sqlalchemy.orm import Session

from dentrack.domain.errors import StorageQuotaExceeded, quota_exceeded_detail
from dentrack.storage.base import KeyValueStore
from dentrack.storage.models import StorageEntry, create_session_factory

logger = logging.getLogger(__name__)

# Browsers give local storage roughly 5 MiB per origin.
DEFAULT_CAPACITY_BYTES = 5 * 1024 * 1024


def entry_size(key: str, value: str) -> int:
    """Size one entry occupies in the store."""
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class SQLAlchemyKeyValueStore(KeyValueStore):
    """SQLAlchemy-based implementation of KeyValueStore interface."""

    def __init__(self, database_url: str, capacity_bytes: int = DEFAULT_CAPACITY_BYTES):
        """Initialize SQLAlchemy key/value store.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
            capacity_bytes: Hard limit on the total persisted size
        """
        self.database_url = database_url
        self._capacity_bytes = capacity_bytes
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    @property
    def capacity_bytes(self) -> int:
        return self._capacity_bytes

    def connect(self) -> None:
        """Connect to the backing store."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the backing store."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def get(self, key: str) -> Optional[str]:
        """Get the value stored under key, or None if absent."""
        session = self._get_session()
        # Another process may have written the file since the last read
        entry = session.get(StorageEntry, key, populate_existing=True)
        if entry is None:
            return None
        return entry.value

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        self.set_many({key: value})

    def set_many(self, values: Mapping[str, str]) -> None:
        """Store several values in one transaction."""
        if not values:
            return
        session = self._get_session()

        required = self._projected_size(session, values)
        if required > self._capacity_bytes:
            raise StorageQuotaExceeded(
                quota_exceeded_detail(", ".join(values), required, self._capacity_bytes)
            )

        try:
            for key, value in values.items():
                entry = session.get(StorageEntry, key, populate_existing=True)
                if entry is None:
                    session.add(StorageEntry(key=key, value=value))
                else:
                    entry.value = value
            session.commit()
        except Exception:
            session.rollback()
            raise
        logger.debug("Stored %d key(s), %d of %d bytes used", len(values), required, self._capacity_bytes)

    def remove(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""
        session = self._get_session()
        try:
            session.query(StorageEntry).filter(StorageEntry.key == key).delete()
            session.commit()
        except Exception:
            session.rollback()
            raise

    def keys(self) -> list[str]:
        """List all stored keys."""
        session = self._get_session()
        return [row.key for row in session.query(StorageEntry.key).order_by(StorageEntry.key).all()]

    def size_in_bytes(self) -> int:
        """Total persisted size (keys plus values, UTF-8 encoded)."""
        session = self._get_session()
        entries = session.query(StorageEntry).populate_existing().all()
        return sum(entry_size(entry.key, entry.value) for entry in entries)

    def _projected_size(self, session: Session, values: Mapping[str, str]) -> int:
        """Size of the whole store after writing values."""
        kept = sum(
            entry_size(entry.key, entry.value)
            for entry in session.query(StorageEntry).populate_existing().all()
            if entry.key not in values
        )
        return kept + sum(entry_size(key, value) for key, value in values.items())

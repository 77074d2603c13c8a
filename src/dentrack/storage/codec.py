"""Record codec: one collection of records per key, stored as a JSON array."""

import json
import logging
from typing import Any, Callable, Iterable, TypeVar

from dentrack.domain.errors import RecordParseError
from dentrack.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

Encoder = Callable[[T], dict[str, Any]]
Decoder = Callable[[Any], T]

# Blobs above this size still get written, with a warning to archive records.
SOFT_LIMIT_BYTES = 4 * 1024 * 1024


def blob_size(blob: str) -> int:
    """Size of a serialized blob in bytes."""
    return len(blob.encode("utf-8"))


class RecordCodec:
    """Serializes collections of records to and from the key/value space."""

    def __init__(self, store: KeyValueStore):
        """Initialize record codec.

        Args:
            store: Backing key/value store
        """
        self.store = store

    def load(self, key: str, decode: Decoder[T]) -> list[T]:
        """Load the collection stored under key.

        A missing key gives an empty list. A blob that is not a JSON array of
        decodable records is logged and also gives an empty list.

        Args:
            key: Storage key
            decode: Function turning one stored record into an entity

        Returns:
            List of entities in storage order
        """
        blob = self.store.get(key)
        if blob is None:
            return []

        try:
            return self.decode_many(json.loads(blob), decode)
        except (json.JSONDecodeError, RecordParseError) as e:
            logger.error("Error parsing %s: %s", key, e)
            return []

    def save(self, key: str, items: Iterable[T], encode: Encoder[T]) -> None:
        """Replace the collection stored under key.

        Args:
            key: Storage key
            items: Entities to persist, in order
            encode: Function turning one entity into a stored record

        Raises:
            StorageQuotaExceeded: If the backing store is full
        """
        blob = self.encode_many(items, encode)
        self.check_size(key, blob)
        self.store.set(key, blob)

    def encode_many(self, items: Iterable[T], encode: Encoder[T]) -> str:
        """Serialize entities into one compact JSON blob."""
        return json.dumps([encode(item) for item in items], separators=(",", ":"))

    def decode_many(self, data: Any, decode: Decoder[T]) -> list[T]:
        """Decode a parsed JSON value into entities.

        Raises:
            RecordParseError: If data is not a list or a record is malformed
        """
        if not isinstance(data, list):
            raise RecordParseError(f"Expected a list of records, got {type(data).__name__}")
        return [decode(record) for record in data]

    def check_size(self, key: str, blob: str) -> int:
        """Warn when a blob crosses the soft limit. Returns its size."""
        size = blob_size(blob)
        if size > SOFT_LIMIT_BYTES:
            logger.warning(
                "Storage for %s is getting large (%.2fMB). Consider archiving old records.",
                key,
                size / 1024 / 1024,
            )
        return size

    def stored_size(self, key: str) -> int:
        """Persisted size of the blob under key, 0 if absent."""
        blob = self.store.get(key)
        return blob_size(blob) if blob is not None else 0

"""Abstract key/value storage interface."""

from abc import ABC, abstractmethod
from typing import Mapping, Optional


class KeyValueStore(ABC):
    """Abstract persisted key/value space for dentrack.

    Every value is a text blob. Implementations must enforce their capacity
    on writes and keep the previous value of a key when a write fails.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the backing store."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the backing store."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get the value stored under key, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value.

        Raises:
            StorageQuotaExceeded: If the write would exceed the capacity
        """
        pass

    @abstractmethod
    def set_many(self, values: Mapping[str, str]) -> None:
        """Store several values in a single write.

        Either every value is written or none is.

        Raises:
            StorageQuotaExceeded: If the write would exceed the capacity
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List all stored keys."""
        pass

    @abstractmethod
    def size_in_bytes(self) -> int:
        """Total persisted size (keys plus values, UTF-8 encoded)."""
        pass

    @property
    @abstractmethod
    def capacity_bytes(self) -> int:
        """Hard capacity of the store in bytes."""
        pass

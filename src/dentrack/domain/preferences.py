"""Preferences store: a single record merged over the defaults."""

import json
import logging
from dataclasses import replace
from typing import Any

from dentrack.domain.entities import UserPreferences
from dentrack.domain.errors import RecordParseError, ValidationError
from dentrack.domain.stores import to_money
from dentrack.storage import keys, mappers
from dentrack.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


class PreferencesStore:
    """Reads and writes the UserPreferences singleton."""

    def __init__(self, store: KeyValueStore):
        """Initialize preferences store.

        Args:
            store: Backing key/value store
        """
        self.store = store

    def get(self) -> UserPreferences:
        """Return stored preferences with defaults for anything missing."""
        blob = self.store.get(keys.PREFERENCES)
        if blob is None:
            return UserPreferences()
        try:
            return mappers.preferences_from_record(json.loads(blob))
        except (json.JSONDecodeError, RecordParseError) as e:
            logger.error("Error parsing %s: %s", keys.PREFERENCES, e)
            return UserPreferences()

    def set(self, **changes: Any) -> UserPreferences:
        """Merge changes into the current preferences and persist them.

        Raises:
            ValidationError: If a field is unknown or a value is invalid
            StorageQuotaExceeded: If the backing store is full
        """
        if "tax_rate" in changes:
            changes["tax_rate"] = to_money("tax_rate", changes["tax_rate"])
        if "show_revenue" in changes and not isinstance(changes["show_revenue"], bool):
            raise ValidationError("show_revenue must be true or false")
        if "primary_color" in changes and not isinstance(changes["primary_color"], str):
            raise ValidationError("primary_color must be a string")
        try:
            updated = replace(self.get(), **changes)
        except TypeError as e:
            raise ValidationError(f"Invalid preferences: {e}") from e
        record = mappers.preferences_to_record(updated)
        self.store.set(keys.PREFERENCES, json.dumps(record))
        return updated

"""Password gate for sensitive actions.

The password is stored base64-encoded. This only keeps it from being read
at a glance: anyone with access to the storage file can decode it. It is a
deterrent, not a security boundary.
"""

import base64
import logging

from dentrack.domain.errors import AccessDenied
from dentrack.storage import keys
from dentrack.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "admin123"


def obfuscate(password: str) -> str:
    """Encode a password the way it is stored."""
    return base64.b64encode(password.encode("utf-8")).decode("ascii")


class AccessGate:
    """Verify and change the single application password."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def initialize(self) -> None:
        """Store the default password if none is set."""
        if not self.store.get(keys.PASSWORD):
            self.store.set(keys.PASSWORD, obfuscate(DEFAULT_PASSWORD))
            logger.info("Initialized default password")

    def verify(self, candidate: str) -> bool:
        """Check candidate against the stored password."""
        return self.store.get(keys.PASSWORD) == obfuscate(candidate)

    def change(self, old_password: str, new_password: str) -> bool:
        """Replace the password if old_password is correct.

        Returns:
            True if the password was changed, False otherwise
        """
        if not self.verify(old_password):
            return False
        self.store.set(keys.PASSWORD, obfuscate(new_password))
        return True

    def require(self, candidate: str) -> None:
        """Raise AccessDenied unless candidate is the current password."""
        if not self.verify(candidate):
            raise AccessDenied()

    @staticmethod
    def default_password() -> str:
        return DEFAULT_PASSWORD

    def is_default(self) -> bool:
        """True while the password has never been changed from the default."""
        return self.verify(DEFAULT_PASSWORD)

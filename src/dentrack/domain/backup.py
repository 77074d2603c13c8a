"""Backup and restore of practice data as JSON documents."""

import json
import logging
from datetime import date, datetime, UTC
from typing import Any, Iterable

from dentrack.domain.errors import (
    DomainError,
    InvalidBackupFormat,
    InvalidPatientsFormat,
    RecordParseError,
)
from dentrack.domain.stores import (
    AppointmentStore,
    EntityStore,
    PatientStore,
    PaymentStore,
    TreatmentStore,
)
from dentrack.storage import keys
from dentrack.storage.base import KeyValueStore

logger = logging.getLogger(__name__)


def export_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def backup_filename(today: date) -> str:
    return f"dental-backup-{today.isoformat()}.json"


def patients_filename(today: date) -> str:
    return f"dental-patients-{today.isoformat()}.json"


class BackupService:
    """Export and import collections, and wipe the stored data.

    A full backup holds patients, treatments, appointments and payments.
    Procedure templates, treatment plans and preferences are not included.
    """

    def __init__(
        self,
        store: KeyValueStore,
        patients: PatientStore,
        treatments: TreatmentStore,
        appointments: AppointmentStore,
        payments: PaymentStore,
    ):
        """Initialize backup service.

        Args:
            store: Backing key/value store
            patients: Patient store
            treatments: Treatment store
            appointments: Appointment store
            payments: Payment store
        """
        self.store = store
        self.collections: dict[str, EntityStore] = {
            "patients": patients,
            "treatments": treatments,
            "appointments": appointments,
            "payments": payments,
        }

    def export_all(self) -> str:
        """Serialize every backed-up collection into one JSON document."""
        return self._export(self.collections)

    def export_patients(self) -> str:
        """Serialize the patients collection into a JSON document."""
        return self._export(["patients"])

    def import_all(self, document: str) -> None:
        """Replace collections with the ones found in a full backup document.

        Collections missing from the document (or null) are left untouched.
        Nothing is written unless the whole document is valid.

        Raises:
            InvalidBackupFormat: If the document cannot be parsed or validated
            StorageQuotaExceeded: If the imported data does not fit
        """
        self._import(document, self.collections, InvalidBackupFormat)

    def import_patients(self, document: str) -> None:
        """Replace the patients collection from a patients document.

        Raises:
            InvalidPatientsFormat: If the document cannot be parsed or validated
            StorageQuotaExceeded: If the imported data does not fit
        """
        self._import(document, ["patients"], InvalidPatientsFormat)

    def clear_all(self) -> None:
        """Remove every collection and the preferences.

        Irreversible. The password is kept. Callers must check the password
        before calling this.
        """
        for key in keys.CLEARABLE_KEYS:
            self.store.remove(key)
        logger.warning("Cleared all stored practice data")

    def _export(self, names: Iterable[str]) -> str:
        document: dict[str, Any] = {}
        for name in names:
            entity_store = self.collections[name]
            encode = type(entity_store).encode
            document[name] = [encode(item) for item in entity_store.get_all()]
        document["exportDate"] = export_timestamp()
        return json.dumps(document, indent=2)

    def _import(
        self, document: str, names: Iterable[str], error_type: type[DomainError]
    ) -> None:
        try:
            data = json.loads(document)
        except (json.JSONDecodeError, TypeError) as e:
            raise error_type() from e
        if not isinstance(data, dict):
            raise error_type()

        blobs: dict[str, str] = {}
        for name in names:
            if data.get(name) is None:
                continue
            entity_store = self.collections[name]
            codec = entity_store.codec
            try:
                items = codec.decode_many(data[name], type(entity_store).decode)
            except RecordParseError as e:
                raise error_type(f"{error_type()} ({name}: {e})") from e
            blob = codec.encode_many(items, type(entity_store).encode)
            codec.check_size(entity_store.storage_key, blob)
            blobs[entity_store.storage_key] = blob
            logger.info("Importing %d %s", len(items), name)

        self.store.set_many(blobs)

"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class RecordParseError(DomainError):
    """A persisted or imported record does not have the expected structure."""


class StorageQuotaExceeded(DomainError):
    """The persisted space is full; the write was rejected."""

    def __init__(self, message: str = "Storage quota exceeded. Please export and clear old data."):
        super().__init__(message)


class InvalidBackupFormat(DomainError):
    """A full backup document could not be imported."""

    def __init__(self, message: str = "Invalid backup file format"):
        super().__init__(message)


class InvalidPatientsFormat(DomainError):
    """A patients-only backup document could not be imported."""

    def __init__(self, message: str = "Invalid patients file format"):
        super().__init__(message)


class AccessDenied(DomainError):
    """The supplied password did not match."""

    def __init__(self, message: str = "Incorrect password"):
        super().__init__(message)


def patient_not_found(patient_id: str) -> str:
    """Return message for missing patient."""
    return f"Patient {patient_id} not found"


def record_not_found(kind: str, record_id: str) -> str:
    """Return message for a missing record of any kind."""
    return f"{kind} {record_id} not found"


def negative_amount(field_name: str) -> str:
    """Return message for a money field below zero."""
    return f"{field_name} must not be negative"


def quota_exceeded_detail(key: str, required: int, capacity: int) -> str:
    """Return message for a rejected write."""
    return (
        f"Storage quota exceeded while saving '{key}' "
        f"({required} of {capacity} bytes). Please export and clear old data."
    )

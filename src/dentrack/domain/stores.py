"""Entity stores: CRUD over one persisted collection per record kind."""

import logging
import uuid
from collections import Counter
from dataclasses import fields, replace
from datetime import date, datetime, UTC
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, ClassVar, Generic, Iterable, Optional, TypeVar

from dateutil.parser import isoparse

from dentrack.domain.aggregation import plan_total
from dentrack.domain.entities import (
    Appointment,
    AppointmentStatus,
    Patient,
    Payment,
    PaymentMethod,
    PlannedProcedure,
    ProcedureTemplate,
    Treatment,
    TreatmentPlan,
    TreatmentStatus,
)
from dentrack.domain.errors import ValidationError, negative_amount
from dentrack.storage import keys, mappers
from dentrack.storage.codec import RecordCodec
from dentrack.utils.amount_parser import parse_amount

logger = logging.getLogger(__name__)

T = TypeVar("T")


def new_id() -> str:
    """Generate a new opaque record id."""
    return uuid.uuid4().hex


def to_money(field_name: str, value: Any) -> Decimal:
    """Coerce a money value to Decimal, rejecting negatives."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = parse_amount(value)
        except ValueError as e:
            raise ValidationError(str(e)) from e
    else:
        raise ValidationError(f"{field_name} must be a number")
    if amount < 0:
        raise ValidationError(negative_amount(field_name))
    return amount


def to_date(field_name: str, value: Any) -> Optional[date]:
    """Coerce a date value, accepting date objects and ISO strings."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return isoparse(value).date()
        except ValueError as e:
            raise ValidationError(f"{field_name} is not a date: {value!r}") from e
    raise ValidationError(f"{field_name} must be a date")


class EntityStore(Generic[T]):
    """Generic store for one record kind.

    Every mutation loads the whole collection, changes it in memory and
    writes it back through the codec.
    """

    storage_key: ClassVar[str]
    entity_type: ClassVar[type]
    kind: ClassVar[str]
    encode: ClassVar[Callable[[Any], dict[str, Any]]]
    decode: ClassVar[Callable[[Any], Any]]

    # Fields assigned by the store and never accepted from callers.
    assigned_fields: ClassVar[tuple[str, ...]] = ("id",)
    money_fields: ClassVar[tuple[str, ...]] = ()
    date_fields: ClassVar[tuple[str, ...]] = ()
    enum_fields: ClassVar[dict[str, type[Enum]]] = {}

    def __init__(self, codec: RecordCodec):
        """Initialize entity store.

        Args:
            codec: Record codec bound to the key/value space
        """
        self.codec = codec

    def get_all(self) -> list[T]:
        """Return every record in storage order."""
        return self.codec.load(self.storage_key, type(self).decode)

    def get_by_id(self, record_id: str) -> Optional[T]:
        """Return the record with the given id, or None."""
        for item in self.get_all():
            if item.id == record_id:
                return item
        return None

    def get_by_field(self, field_name: str, value: Any) -> list[T]:
        """Return records whose field equals value."""
        self._check_field_names([field_name])
        return [item for item in self.get_all() if getattr(item, field_name) == value]

    def count(self) -> int:
        return len(self.get_all())

    def add(self, **values: Any) -> T:
        """Create a record, assigning its id, and append it to the collection.

        Returns:
            The stored record

        Raises:
            ValidationError: If a store-assigned field is supplied or a value is invalid
            StorageQuotaExceeded: If the backing store is full
        """
        self._reject_assigned(values)
        self._check_field_names(values)
        prepared = self._prepare_new(self._normalize(values))
        try:
            record = self.entity_type(id=new_id(), **prepared)
        except TypeError as e:
            raise ValidationError(f"Invalid {self.kind} fields: {e}") from e
        self._validate(record)

        items = self.get_all()
        items.append(record)
        self._save(items)
        logger.debug("Added %s %s", self.kind, record.id)
        return record

    def update(self, record_id: str, **updates: Any) -> None:
        """Merge updates into the record with the given id.

        Fields not named keep their values. An unknown id is ignored.

        Raises:
            ValidationError: If a store-assigned or unknown field is named
            StorageQuotaExceeded: If the backing store is full
        """
        self._reject_assigned(updates)
        self._check_field_names(updates)
        items = self.get_all()
        for index, item in enumerate(items):
            if item.id == record_id:
                changes = self._prepare_update(item, self._normalize(updates))
                updated = replace(item, **changes)
                self._validate(updated)
                items[index] = updated
                self._save(items)
                return
        logger.debug("No %s with id %s, update ignored", self.kind, record_id)

    def delete(self, record_id: str) -> None:
        """Remove the record with the given id. Unknown ids are ignored."""
        items = self.get_all()
        remaining = [item for item in items if item.id != record_id]
        if len(remaining) != len(items):
            self._save(remaining)

    def replace_all(self, items: Iterable[T]) -> None:
        """Overwrite the whole collection."""
        self._save(list(items))

    def _save(self, items: list[T]) -> None:
        self.codec.save(self.storage_key, items, type(self).encode)

    def _reject_assigned(self, values: dict[str, Any]) -> None:
        for name in self.assigned_fields:
            if name in values:
                raise ValidationError(f"{self.kind} field '{name}' is assigned by the store")

    def _check_field_names(self, names: Iterable[str]) -> None:
        known = {f.name for f in fields(self.entity_type)}
        unknown = sorted(set(names) - known)
        if unknown:
            raise ValidationError(f"Unknown {self.kind} field(s): {', '.join(unknown)}")

    def _normalize(self, values: dict[str, Any]) -> dict[str, Any]:
        normalized = dict(values)
        for name, enum_type in self.enum_fields.items():
            if name in normalized:
                try:
                    normalized[name] = enum_type(normalized[name])
                except ValueError as e:
                    raise ValidationError(f"Invalid {name}: {normalized[name]!r}") from e
        for name in self.money_fields:
            if name in normalized:
                normalized[name] = to_money(name, normalized[name])
        for name in self.date_fields:
            if name in normalized:
                normalized[name] = to_date(name, normalized[name])
        return normalized

    def _prepare_new(self, values: dict[str, Any]) -> dict[str, Any]:
        return values

    def _prepare_update(self, current: T, changes: dict[str, Any]) -> dict[str, Any]:
        return changes

    def _validate(self, record: T) -> None:
        """Reject a record whose stored form would not decode back."""
        try:
            type(self).decode(type(self).encode(record))
        except (ValueError, TypeError, AttributeError) as e:
            raise ValidationError(f"Invalid {self.kind}: {e}") from e
        self._check(record)

    def _check(self, record: T) -> None:
        pass


class PatientStore(EntityStore[Patient]):
    """Store for patients. created_at is set on add and never changes."""

    storage_key = keys.PATIENTS
    entity_type = Patient
    kind = "Patient"
    encode = staticmethod(mappers.patient_to_record)
    decode = staticmethod(mappers.patient_from_record)
    assigned_fields = ("id", "created_at")
    date_fields = ("date_of_birth", "last_visit")

    def _prepare_new(self, values: dict[str, Any]) -> dict[str, Any]:
        values["created_at"] = datetime.now(UTC)
        return values

    def search(self, term: str) -> list[Patient]:
        """Find patients by name or email (case-insensitive) or phone."""
        needle = term.strip().lower()
        if not needle:
            return self.get_all()
        return [
            patient
            for patient in self.get_all()
            if needle in patient.full_name.lower()
            or needle in patient.phone
            or needle in (patient.email or "").lower()
        ]


class TreatmentStore(EntityStore[Treatment]):
    """Store for treatments."""

    storage_key = keys.TREATMENTS
    entity_type = Treatment
    kind = "Treatment"
    encode = staticmethod(mappers.treatment_to_record)
    decode = staticmethod(mappers.treatment_from_record)
    money_fields = ("cost", "paid")
    date_fields = ("date",)
    enum_fields = {"status": TreatmentStatus}

    def get_by_patient(self, patient_id: str) -> list[Treatment]:
        return self.get_by_field("patient_id", patient_id)


class AppointmentStore(EntityStore[Appointment]):
    """Store for appointments."""

    storage_key = keys.APPOINTMENTS
    entity_type = Appointment
    kind = "Appointment"
    encode = staticmethod(mappers.appointment_to_record)
    decode = staticmethod(mappers.appointment_from_record)
    date_fields = ("date",)
    enum_fields = {"status": AppointmentStatus}

    def _check(self, record: Appointment) -> None:
        if isinstance(record.duration, bool) or not isinstance(record.duration, int):
            raise ValidationError("duration must be a whole number of minutes")
        if record.duration <= 0:
            raise ValidationError("duration must be positive")

    def get_by_patient(self, patient_id: str) -> list[Appointment]:
        return self.get_by_field("patient_id", patient_id)

    def get_by_date(self, day: date) -> list[Appointment]:
        return self.get_by_field("date", day)

    def day_schedule(self, day: date) -> list[Appointment]:
        """Appointments on day, ordered by start time."""
        return sorted(self.get_by_date(day), key=lambda appointment: appointment.time)

    def status_counts(self, day: date) -> Counter:
        """Number of appointments on day per status."""
        return Counter(appointment.status for appointment in self.get_by_date(day))


class PaymentStore(EntityStore[Payment]):
    """Store for payments."""

    storage_key = keys.PAYMENTS
    entity_type = Payment
    kind = "Payment"
    encode = staticmethod(mappers.payment_to_record)
    decode = staticmethod(mappers.payment_from_record)
    money_fields = ("amount",)
    date_fields = ("date",)
    enum_fields = {"method": PaymentMethod}

    def get_by_patient(self, patient_id: str) -> list[Payment]:
        return self.get_by_field("patient_id", patient_id)


class ProcedureTemplateStore(EntityStore[ProcedureTemplate]):
    """Store for procedure templates."""

    storage_key = keys.PROCEDURES
    entity_type = ProcedureTemplate
    kind = "Procedure"
    encode = staticmethod(mappers.procedure_template_to_record)
    decode = staticmethod(mappers.procedure_template_from_record)
    money_fields = ("default_cost",)

    CATEGORIES = (
        "General",
        "Preventive",
        "Restorative",
        "Cosmetic",
        "Orthodontics",
        "Surgery",
        "Endodontics",
        "Periodontics",
    )

    def _check(self, record: ProcedureTemplate) -> None:
        if record.duration is not None and record.duration <= 0:
            raise ValidationError("duration must be positive")

    def get_by_category(self, category: str) -> list[ProcedureTemplate]:
        return self.get_by_field("category", category)


def planned_procedure_from_template(
    template: ProcedureTemplate, tooth: Optional[str] = None, notes: Optional[str] = None
) -> PlannedProcedure:
    """Snapshot a template's name and default cost into a plan line."""
    return PlannedProcedure(
        procedure_id=template.id,
        procedure_name=template.name,
        cost=template.default_cost,
        tooth=tooth,
        notes=notes,
    )


class TreatmentPlanStore(EntityStore[TreatmentPlan]):
    """Store for treatment plans.

    total_cost is computed from the procedures whenever they are written,
    unless the caller supplies it. It is never recomputed on read.
    """

    storage_key = keys.TREATMENT_PLANS
    entity_type = TreatmentPlan
    kind = "Treatment plan"
    encode = staticmethod(mappers.treatment_plan_to_record)
    decode = staticmethod(mappers.treatment_plan_from_record)
    money_fields = ("total_cost",)

    def _normalize(self, values: dict[str, Any]) -> dict[str, Any]:
        normalized = super()._normalize(values)
        if "procedures" in normalized:
            lines = []
            for line in normalized["procedures"]:
                if not isinstance(line, PlannedProcedure):
                    raise ValidationError("procedures must be PlannedProcedure lines")
                lines.append(replace(line, cost=to_money("cost", line.cost)))
            normalized["procedures"] = tuple(lines)
        return normalized

    def _prepare_new(self, values: dict[str, Any]) -> dict[str, Any]:
        if "total_cost" not in values:
            values["total_cost"] = plan_total(values.get("procedures", ()))
        return values

    def _prepare_update(self, current: TreatmentPlan, changes: dict[str, Any]) -> dict[str, Any]:
        if "procedures" in changes and "total_cost" not in changes:
            changes["total_cost"] = plan_total(changes["procedures"])
        return changes

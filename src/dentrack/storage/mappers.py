"""Mapper functions to convert between domain entities and stored JSON records.

Records use the camelCase field names of the browser version of the app,
so backups written by it can be imported unchanged. Optional fields that
are None are left out of the record.
"""

from datetime import date, datetime, UTC
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar

from dateutil.parser import isoparse

from dentrack.domain import entities as domain
from dentrack.domain.errors import RecordParseError

E = TypeVar("E", bound=Enum)

_MISSING = object()


def _field(record: Mapping[str, Any], name: str, default: Any = _MISSING) -> Any:
    if name in record and record[name] is not None:
        return record[name]
    if default is _MISSING:
        raise RecordParseError(f"Record is missing '{name}'")
    return default


def _text(record: Mapping[str, Any], name: str, default: Any = _MISSING) -> Any:
    value = _field(record, name, default)
    if value is not None and not isinstance(value, str):
        raise RecordParseError(f"Field '{name}' must be a string, got {type(value).__name__}")
    return value


def _optional_text(record: Mapping[str, Any], name: str) -> Optional[str]:
    value = _text(record, name, None)
    return value if value else None


def _decimal(record: Mapping[str, Any], name: str, default: Any = _MISSING) -> Decimal:
    value = _field(record, name, default)
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise RecordParseError(f"Field '{name}' must be a number")
    try:
        amount = Decimal(str(value))
    except InvalidOperation as e:
        raise RecordParseError(f"Field '{name}' is not a number: {value!r}") from e
    if not amount.is_finite():
        raise RecordParseError(f"Field '{name}' is not a number: {value!r}")
    return amount


def _int(record: Mapping[str, Any], name: str, default: Any = _MISSING) -> Optional[int]:
    value = _field(record, name, default)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RecordParseError(f"Field '{name}' must be a whole number")
    if isinstance(value, float) and not value.is_integer():
        # is_integer() is also False for NaN and infinities
        raise RecordParseError(f"Field '{name}' must be a whole number, got {value!r}")
    return int(value)


def _date(record: Mapping[str, Any], name: str) -> date:
    value = _text(record, name)
    try:
        return isoparse(value).date()
    except ValueError as e:
        raise RecordParseError(f"Field '{name}' is not a date: {value!r}") from e


def _optional_date(record: Mapping[str, Any], name: str) -> Optional[date]:
    if not record.get(name):
        return None
    return _date(record, name)


def _datetime(record: Mapping[str, Any], name: str) -> datetime:
    value = _text(record, name)
    try:
        parsed = isoparse(value)
    except ValueError as e:
        raise RecordParseError(f"Field '{name}' is not a timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _enum(record: Mapping[str, Any], name: str, enum_type: Type[E]) -> E:
    value = _field(record, name)
    try:
        return enum_type(value)
    except ValueError as e:
        raise RecordParseError(f"Field '{name}' has unknown value {value!r}") from e


def _number(value: Decimal) -> int | float:
    """Render a Decimal as a JSON number."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _compact(record: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in record.items() if value is not None}


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _require_mapping(record: Any) -> Mapping[str, Any]:
    if not isinstance(record, Mapping):
        raise RecordParseError(f"Record must be an object, got {type(record).__name__}")
    return record


def patient_to_record(patient: domain.Patient) -> dict[str, Any]:
    """Convert domain Patient entity to a stored record."""
    return _compact(
        {
            "id": patient.id,
            "firstName": patient.first_name,
            "lastName": patient.last_name,
            "dateOfBirth": _iso(patient.date_of_birth),
            "phone": patient.phone,
            "email": patient.email,
            "address": patient.address,
            "emergencyContact": patient.emergency_contact,
            "emergencyPhone": patient.emergency_phone,
            "medicalHistory": patient.medical_history,
            "allergies": patient.allergies,
            "insurance": patient.insurance,
            "createdAt": patient.created_at.isoformat(),
            "lastVisit": _iso(patient.last_visit),
        }
    )


def patient_from_record(record: Any) -> domain.Patient:
    """Convert a stored record to domain Patient entity."""
    record = _require_mapping(record)
    return domain.Patient(
        id=_text(record, "id"),
        first_name=_text(record, "firstName"),
        last_name=_text(record, "lastName", ""),
        phone=_text(record, "phone", ""),
        created_at=_datetime(record, "createdAt"),
        date_of_birth=_optional_date(record, "dateOfBirth"),
        email=_optional_text(record, "email"),
        address=_optional_text(record, "address"),
        emergency_contact=_optional_text(record, "emergencyContact"),
        emergency_phone=_optional_text(record, "emergencyPhone"),
        medical_history=_optional_text(record, "medicalHistory"),
        allergies=_optional_text(record, "allergies"),
        insurance=_optional_text(record, "insurance"),
        last_visit=_optional_date(record, "lastVisit"),
    )


def treatment_to_record(treatment: domain.Treatment) -> dict[str, Any]:
    """Convert domain Treatment entity to a stored record."""
    return _compact(
        {
            "id": treatment.id,
            "patientId": treatment.patient_id,
            "date": treatment.date.isoformat(),
            "procedure": treatment.procedure,
            "tooth": treatment.tooth,
            "notes": treatment.notes,
            "cost": _number(treatment.cost),
            "paid": _number(treatment.paid),
            "status": treatment.status.value,
        }
    )


def treatment_from_record(record: Any) -> domain.Treatment:
    """Convert a stored record to domain Treatment entity."""
    record = _require_mapping(record)
    return domain.Treatment(
        id=_text(record, "id"),
        patient_id=_text(record, "patientId"),
        date=_date(record, "date"),
        procedure=_text(record, "procedure"),
        cost=_decimal(record, "cost"),
        paid=_decimal(record, "paid", 0),
        status=_enum(record, "status", domain.TreatmentStatus),
        notes=_text(record, "notes", ""),
        tooth=_optional_text(record, "tooth"),
    )


def appointment_to_record(appointment: domain.Appointment) -> dict[str, Any]:
    """Convert domain Appointment entity to a stored record."""
    return _compact(
        {
            "id": appointment.id,
            "patientId": appointment.patient_id,
            "patientName": appointment.patient_name,
            "date": appointment.date.isoformat(),
            "time": appointment.time,
            "duration": appointment.duration,
            "type": appointment.type,
            "notes": appointment.notes,
            "status": appointment.status.value,
            "chair": appointment.chair,
        }
    )


def appointment_from_record(record: Any) -> domain.Appointment:
    """Convert a stored record to domain Appointment entity."""
    record = _require_mapping(record)
    return domain.Appointment(
        id=_text(record, "id"),
        patient_id=_text(record, "patientId"),
        patient_name=_text(record, "patientName", ""),
        date=_date(record, "date"),
        time=_text(record, "time"),
        duration=_int(record, "duration"),
        type=_text(record, "type", ""),
        status=_enum(record, "status", domain.AppointmentStatus),
        notes=_text(record, "notes", ""),
        chair=_optional_text(record, "chair"),
    )


def payment_to_record(payment: domain.Payment) -> dict[str, Any]:
    """Convert domain Payment entity to a stored record."""
    return _compact(
        {
            "id": payment.id,
            "patientId": payment.patient_id,
            "treatmentId": payment.treatment_id,
            "date": payment.date.isoformat(),
            "amount": _number(payment.amount),
            "method": payment.method.value,
            "notes": payment.notes,
        }
    )


def payment_from_record(record: Any) -> domain.Payment:
    """Convert a stored record to domain Payment entity."""
    record = _require_mapping(record)
    return domain.Payment(
        id=_text(record, "id"),
        patient_id=_text(record, "patientId"),
        date=_date(record, "date"),
        amount=_decimal(record, "amount"),
        method=_enum(record, "method", domain.PaymentMethod),
        notes=_text(record, "notes", ""),
        treatment_id=_optional_text(record, "treatmentId"),
    )


def procedure_template_to_record(template: domain.ProcedureTemplate) -> dict[str, Any]:
    """Convert domain ProcedureTemplate entity to a stored record."""
    return _compact(
        {
            "id": template.id,
            "name": template.name,
            "code": template.code,
            "defaultCost": _number(template.default_cost),
            "duration": template.duration,
            "category": template.category,
            "description": template.description,
        }
    )


def procedure_template_from_record(record: Any) -> domain.ProcedureTemplate:
    """Convert a stored record to domain ProcedureTemplate entity."""
    record = _require_mapping(record)
    return domain.ProcedureTemplate(
        id=_text(record, "id"),
        name=_text(record, "name"),
        default_cost=_decimal(record, "defaultCost"),
        category=_text(record, "category", ""),
        code=_optional_text(record, "code"),
        duration=_int(record, "duration", None),
        description=_optional_text(record, "description"),
    )


def planned_procedure_to_record(line: domain.PlannedProcedure) -> dict[str, Any]:
    """Convert one treatment plan line to a stored record."""
    return _compact(
        {
            "procedureId": line.procedure_id,
            "procedureName": line.procedure_name,
            "tooth": line.tooth,
            "cost": _number(line.cost),
            "notes": line.notes,
        }
    )


def planned_procedure_from_record(record: Any) -> domain.PlannedProcedure:
    """Convert a stored record to one treatment plan line."""
    record = _require_mapping(record)
    return domain.PlannedProcedure(
        procedure_id=_text(record, "procedureId"),
        procedure_name=_text(record, "procedureName", ""),
        cost=_decimal(record, "cost"),
        tooth=_optional_text(record, "tooth"),
        notes=_optional_text(record, "notes"),
    )


def treatment_plan_to_record(plan: domain.TreatmentPlan) -> dict[str, Any]:
    """Convert domain TreatmentPlan entity to a stored record."""
    return {
        "id": plan.id,
        "name": plan.name,
        "description": plan.description,
        "procedures": [planned_procedure_to_record(line) for line in plan.procedures],
        "totalCost": _number(plan.total_cost),
    }


def treatment_plan_from_record(record: Any) -> domain.TreatmentPlan:
    """Convert a stored record to domain TreatmentPlan entity.

    totalCost is read as stored and never recomputed from the lines.
    """
    record = _require_mapping(record)
    lines = _field(record, "procedures", [])
    if not isinstance(lines, list):
        raise RecordParseError("Field 'procedures' must be a list")
    return domain.TreatmentPlan(
        id=_text(record, "id"),
        name=_text(record, "name"),
        description=_text(record, "description", ""),
        procedures=tuple(planned_procedure_from_record(line) for line in lines),
        total_cost=_decimal(record, "totalCost", 0),
    )


def preferences_to_record(preferences: domain.UserPreferences) -> dict[str, Any]:
    """Convert UserPreferences to a stored record."""
    return {
        "primaryColor": preferences.primary_color,
        "showRevenue": preferences.show_revenue,
        "taxRate": _number(preferences.tax_rate),
    }


def preferences_from_record(record: Any) -> domain.UserPreferences:
    """Convert a stored record to UserPreferences, filling gaps from the defaults."""
    record = _require_mapping(record)
    defaults = domain.UserPreferences()
    show_revenue = _field(record, "showRevenue", defaults.show_revenue)
    if not isinstance(show_revenue, bool):
        raise RecordParseError("Field 'showRevenue' must be a boolean")
    return domain.UserPreferences(
        primary_color=_text(record, "primaryColor", defaults.primary_color),
        show_revenue=show_revenue,
        tax_rate=_decimal(record, "taxRate", defaults.tax_rate),
    )

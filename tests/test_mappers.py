"""Tests for storage mappers."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from dentrack.domain.entities import (
    AppointmentStatus,
    Patient,
    PaymentMethod,
    PlannedProcedure,
    Treatment,
    TreatmentPlan,
    TreatmentStatus,
    UserPreferences,
)
from dentrack.domain.errors import RecordParseError
from dentrack.storage.mappers import (
    appointment_from_record,
    patient_from_record,
    patient_to_record,
    payment_from_record,
    preferences_from_record,
    procedure_template_from_record,
    treatment_from_record,
    treatment_plan_from_record,
    treatment_plan_to_record,
    treatment_to_record,
)


class TestPatientMapper:
    """Tests for Patient mapper."""

    def test_reads_browser_record(self):
        """Records exported by the browser app use empty strings for blanks."""
        record = {
            "id": "1712345678901",
            "firstName": "Ana",
            "lastName": "Diaz",
            "dateOfBirth": "1990-05-17",
            "phone": "555-0101",
            "email": "",
            "address": "",
            "emergencyContact": "",
            "emergencyPhone": "",
            "medicalHistory": "",
            "allergies": "Penicillin",
            "insurance": "",
            "createdAt": "2024-04-05T10:15:30.123Z",
        }
        patient = patient_from_record(record)

        assert isinstance(patient, Patient)
        assert patient.id == "1712345678901"
        assert patient.full_name == "Ana Diaz"
        assert patient.date_of_birth == date(1990, 5, 17)
        assert patient.email is None
        assert patient.allergies == "Penicillin"
        assert patient.created_at == datetime(2024, 4, 5, 10, 15, 30, 123000, tzinfo=UTC)
        assert patient.last_visit is None

    def test_to_record_omits_missing_optionals(self):
        patient = Patient(
            id="p1",
            first_name="Bo",
            last_name="Li",
            phone="555",
            created_at=datetime(2024, 1, 1, tzinfo=UTC),
        )
        record = patient_to_record(patient)

        assert record == {
            "id": "p1",
            "firstName": "Bo",
            "lastName": "Li",
            "phone": "555",
            "createdAt": "2024-01-01T00:00:00+00:00",
        }
        assert patient_from_record(record) == patient

    def test_missing_created_at_is_rejected(self):
        with pytest.raises(RecordParseError, match="createdAt"):
            patient_from_record({"id": "p1", "firstName": "A", "lastName": "B", "phone": ""})

    def test_non_object_is_rejected(self):
        with pytest.raises(RecordParseError):
            patient_from_record(["not", "a", "record"])


class TestTreatmentMapper:
    """Tests for Treatment mapper."""

    def test_money_round_trips_as_numbers(self):
        treatment = Treatment(
            id="t1",
            patient_id="p1",
            date=date(2024, 3, 4),
            procedure="Crown",
            cost=Decimal("850.50"),
            paid=Decimal("100"),
            status=TreatmentStatus.ONGOING,
        )
        record = treatment_to_record(treatment)

        assert record["cost"] == 850.5
        assert record["paid"] == 100
        assert isinstance(record["paid"], int)
        assert record["status"] == "ongoing"
        assert treatment_from_record(record) == treatment

    def test_unknown_status_is_rejected(self):
        with pytest.raises(RecordParseError, match="status"):
            treatment_from_record(
                {
                    "id": "t1",
                    "patientId": "p1",
                    "date": "2024-03-04",
                    "procedure": "Crown",
                    "cost": 10,
                    "paid": 0,
                    "status": "abandoned",
                }
            )

    def test_string_cost_is_rejected_if_not_numeric(self):
        with pytest.raises(RecordParseError, match="cost"):
            treatment_from_record(
                {
                    "id": "t1",
                    "patientId": "p1",
                    "date": "2024-03-04",
                    "procedure": "Crown",
                    "cost": "lots",
                    "paid": 0,
                    "status": "completed",
                }
            )


class TestOtherMappers:
    """Tests for the remaining mappers."""

    def test_appointment(self):
        appointment = appointment_from_record(
            {
                "id": "a1",
                "patientId": "p1",
                "patientName": "Ana Diaz",
                "date": "2024-03-20",
                "time": "09:30",
                "duration": 45,
                "type": "Cleaning",
                "notes": "",
                "status": "no-show",
            }
        )
        assert appointment.status == AppointmentStatus.NO_SHOW
        assert appointment.duration == 45
        assert appointment.chair is None

    def test_payment(self):
        payment = payment_from_record(
            {
                "id": "pay1",
                "patientId": "p1",
                "date": "2024-03-04",
                "amount": 19.99,
                "method": "insurance",
                "notes": "claim 42",
            }
        )
        assert payment.amount == Decimal("19.99")
        assert payment.method == PaymentMethod.INSURANCE
        assert payment.treatment_id is None

    @pytest.mark.parametrize("duration", [float("nan"), float("inf"), 45.5, "45"])
    def test_appointment_duration_must_be_whole(self, duration):
        with pytest.raises(RecordParseError, match="duration"):
            appointment_from_record(
                {
                    "id": "a1",
                    "patientId": "p1",
                    "date": "2024-03-20",
                    "time": "09:30",
                    "duration": duration,
                    "status": "scheduled",
                }
            )

    def test_integral_float_duration_is_accepted(self):
        appointment = appointment_from_record(
            {"id": "a1", "patientId": "p1", "date": "2024-03-20", "time": "09:30", "duration": 45.0, "status": "scheduled"}
        )
        assert appointment.duration == 45

    def test_procedure_template(self):
        template = procedure_template_from_record(
            {"id": "pr1", "name": "Scaling", "defaultCost": 80, "category": "Preventive", "duration": 30}
        )
        assert template.default_cost == Decimal("80")
        assert template.duration == 30
        assert template.code is None

    def test_treatment_plan_keeps_stored_total(self):
        record = {
            "id": "plan1",
            "name": "Restoration",
            "description": "",
            "procedures": [
                {"procedureId": "pr1", "procedureName": "Filling", "cost": 100, "tooth": "14"},
                {"procedureId": "pr2", "procedureName": "Crown", "cost": 500},
            ],
            "totalCost": 550,
        }
        plan = treatment_plan_from_record(record)

        assert plan.total_cost == Decimal("550")
        assert plan.procedures[0] == PlannedProcedure(
            procedure_id="pr1", procedure_name="Filling", cost=Decimal("100"), tooth="14"
        )
        assert treatment_plan_to_record(plan) == record

    def test_treatment_plan_procedures_must_be_list(self):
        with pytest.raises(RecordParseError):
            treatment_plan_from_record({"id": "x", "name": "y", "procedures": "nope"})

    def test_preferences_merge_over_defaults(self):
        prefs = preferences_from_record({"showRevenue": False, "unknown": 1})
        assert prefs == UserPreferences(show_revenue=False)

    def test_preferences_reject_bad_flag(self):
        with pytest.raises(RecordParseError):
            preferences_from_record({"showRevenue": "yes"})


def test_plan_dataclass_defaults():
    plan = TreatmentPlan(id="x", name="Empty", description="")
    assert plan.procedures == ()
    assert plan.total_cost == Decimal("0")

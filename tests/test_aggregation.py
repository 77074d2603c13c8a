"""Tests for dashboard, balance and invoice aggregations."""

from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from dentrack.domain.aggregation import (
    compute_invoice,
    dashboard_stats,
    patient_balance,
    payments_total,
    plan_total,
    revenue_between,
)
from dentrack.domain.entities import (
    Appointment,
    AppointmentStatus,
    DashboardStats,
    Patient,
    Payment,
    PaymentMethod,
    PlannedProcedure,
    Treatment,
    TreatmentStatus,
)
from dentrack.domain.errors import NotFoundError


def make_patient(pid, created_at):
    return Patient(id=pid, first_name="P", last_name=pid, phone="", created_at=created_at)


def make_payment(pid, day, amount):
    return Payment(id=f"pay-{day}-{amount}", patient_id=pid, date=day, amount=Decimal(amount), method=PaymentMethod.CASH)


def make_treatment(pid, cost, paid, status=TreatmentStatus.COMPLETED):
    return Treatment(
        id=f"t-{cost}-{paid}",
        patient_id=pid,
        date=date(2024, 3, 1),
        procedure="Filling",
        cost=Decimal(cost),
        paid=Decimal(paid),
        status=status,
    )


def make_appointment(day):
    return Appointment(
        id=f"a-{day}",
        patient_id="p1",
        patient_name="P p1",
        date=day,
        time="09:00",
        duration=30,
        type="Checkup",
        status=AppointmentStatus.SCHEDULED,
    )


class TestDashboard:
    """Tests for dashboard_stats."""

    def test_counts_and_revenue(self):
        today = date(2024, 3, 15)
        patients = [
            make_patient("p1", datetime(2024, 1, 10, 12, tzinfo=UTC)),
            make_patient("p2", datetime(2024, 3, 2, 12, tzinfo=UTC)),
            make_patient("p3", datetime(2024, 3, 14, 12, tzinfo=UTC)),
        ]
        appointments = [make_appointment(today), make_appointment(date(2024, 3, 16))]
        payments = [
            make_payment("p1", date(2024, 3, 1), "100"),
            make_payment("p1", date(2024, 3, 31), "50"),
            make_payment("p2", date(2024, 2, 29), "100"),
            make_payment("p2", date(2024, 1, 31), "999"),
        ]
        treatments = [
            make_treatment("p1", "200", "50"),
            make_treatment("p2", "80", "80"),
            make_treatment("p2", "500", "0", TreatmentStatus.PLANNED),
        ]

        stats = dashboard_stats(patients, appointments, payments, treatments, today)

        assert stats.total_patients == 3
        assert stats.new_patients_this_month == 2
        assert stats.today_appointments == 1
        assert stats.month_revenue == Decimal("150")
        assert stats.last_month_revenue == Decimal("100")
        assert stats.revenue_growth == Decimal("50.0")
        assert stats.pending_payments == Decimal("150")
        assert stats.completed_treatments == 2

    def test_january_compares_with_december(self):
        payments = [make_payment("p1", date(2023, 12, 31), "40"), make_payment("p1", date(2024, 1, 1), "10")]
        stats = dashboard_stats([], [], payments, [], date(2024, 1, 20))
        assert stats.last_month_revenue == Decimal("40")
        assert stats.month_revenue == Decimal("10")
        assert stats.revenue_growth == Decimal("-75.0")

    def test_empty_practice(self):
        stats = dashboard_stats([], [], [], [], date(2024, 3, 15))
        assert stats.total_patients == 0
        assert stats.month_revenue == Decimal("0")
        assert stats.revenue_growth == Decimal("0")


@pytest.mark.parametrize(
    "month, last_month, expected",
    [
        ("100", "0", "0"),
        ("0", "0", "0"),
        ("110", "100", "10.0"),
        ("100", "300", "-66.7"),
        ("200", "300", "-33.3"),
        ("100.05", "100", "0.1"),
    ],
)
def test_revenue_growth(month, last_month, expected):
    stats = DashboardStats(
        total_patients=0,
        new_patients_this_month=0,
        today_appointments=0,
        month_revenue=Decimal(month),
        last_month_revenue=Decimal(last_month),
        pending_payments=Decimal("0"),
        completed_treatments=0,
    )
    assert stats.revenue_growth == Decimal(expected)


def test_revenue_between_is_inclusive():
    payments = [make_payment("p1", date(2024, 3, 1), "5"), make_payment("p1", date(2024, 3, 31), "7")]
    assert revenue_between(payments, (date(2024, 3, 1), date(2024, 3, 31))) == Decimal("12")
    assert revenue_between(payments, (date(2024, 3, 2), date(2024, 3, 30))) == Decimal("0")


class TestBalances:
    """Tests for patient balance and payments totals."""

    def test_patient_balance_uses_treatments_only(self, repo, sample_patient, sample_treatments, sample_payment):
        balance = repo.patient_balance(sample_patient.id)
        assert balance.total_cost == Decimal("150")
        assert balance.total_paid == Decimal("40")
        assert balance.balance == Decimal("110")
        assert repo.patient_payments_total(sample_patient.id) == Decimal("60")

    def test_overpaid_treatment_gives_negative_balance(self):
        balance = patient_balance([make_treatment("p1", "100", "120")])
        assert balance.balance == Decimal("-20")

    def test_no_records(self):
        assert patient_balance([]).balance == Decimal("0")
        assert payments_total([]) == Decimal("0")


class TestInvoice:
    """Tests for invoice totals."""

    def test_invoice_with_tax(self, repo, sample_patient, sample_treatments, sample_payment):
        repo.preferences.set(tax_rate=10)

        invoice = repo.invoice(sample_patient.id)

        assert invoice.subtotal == Decimal("150")
        assert invoice.tax_rate == Decimal("10")
        assert invoice.tax == Decimal("15")
        assert invoice.total == Decimal("165")
        assert invoice.amount_paid == Decimal("60")
        assert invoice.balance == Decimal("105")

    def test_invoice_without_tax_by_default(self, repo, sample_patient, sample_treatments):
        invoice = repo.invoice(sample_patient.id)
        assert invoice.tax == Decimal("0")
        assert invoice.total == Decimal("150")
        assert invoice.balance == Decimal("150")

    def test_invoice_selected_treatments(self, repo, sample_patient, sample_treatments):
        invoice = repo.invoice(sample_patient.id, treatment_ids=[sample_treatments[1].id])
        assert invoice.subtotal == Decimal("50")

    def test_overpayment_gives_negative_balance(self):
        invoice = compute_invoice(
            [make_treatment("p1", "100", "0")],
            [make_payment("p1", date(2024, 3, 1), "130")],
            Decimal("0"),
        )
        assert invoice.balance == Decimal("-30")

    def test_unknown_patient(self, repo):
        with pytest.raises(NotFoundError, match="missing"):
            repo.invoice("missing")


def test_plan_total():
    lines = [
        PlannedProcedure(procedure_id="a", procedure_name="A", cost=Decimal("99.99")),
        PlannedProcedure(procedure_id="b", procedure_name="B", cost=Decimal("0.01")),
    ]
    assert plan_total(lines) == Decimal("100.00")
    assert plan_total([]) == Decimal("0")

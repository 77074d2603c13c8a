"""Read-only aggregations across practice records.

Every function recomputes from the records it is given; nothing is cached.
Snapshot fields (appointment patient names, plan line costs, plan totals)
are used as stored and never re-resolved against their source records.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Sequence

from dateutil.relativedelta import relativedelta
from dateutil.tz import tzlocal

from dentrack.domain.entities import (
    Appointment,
    DashboardStats,
    InvoiceTotals,
    Patient,
    PatientBalance,
    Payment,
    PlannedProcedure,
    Treatment,
    TreatmentStatus,
)
from dentrack.utils.date_parser import get_month_range

ZERO = Decimal("0")


def _in_range(day: date, bounds: tuple[date, date]) -> bool:
    start, end = bounds
    return start <= day <= end


def _local_date(timestamp: datetime) -> date:
    if timestamp.tzinfo is None:
        return timestamp.date()
    return timestamp.astimezone(tzlocal()).date()


def revenue_between(payments: Iterable[Payment], bounds: tuple[date, date]) -> Decimal:
    """Sum of payment amounts dated within bounds (inclusive)."""
    return sum((p.amount for p in payments if _in_range(p.date, bounds)), ZERO)


def dashboard_stats(
    patients: Sequence[Patient],
    appointments: Sequence[Appointment],
    payments: Sequence[Payment],
    treatments: Sequence[Treatment],
    today: date,
) -> DashboardStats:
    """Compute dashboard statistics as of today.

    Args:
        patients: All patients
        appointments: All appointments
        payments: All payments
        treatments: All treatments
        today: Reference day; its calendar month is "this month"

    Returns:
        DashboardStats for the practice
    """
    this_month = get_month_range(today)
    last_month = get_month_range(today - relativedelta(months=1))

    completed = [t for t in treatments if t.status == TreatmentStatus.COMPLETED]

    return DashboardStats(
        total_patients=len(patients),
        new_patients_this_month=sum(
            1 for p in patients if _in_range(_local_date(p.created_at), this_month)
        ),
        today_appointments=sum(1 for a in appointments if a.date == today),
        month_revenue=revenue_between(payments, this_month),
        last_month_revenue=revenue_between(payments, last_month),
        pending_payments=sum((t.cost - t.paid for t in completed), ZERO),
        completed_treatments=len(completed),
    )


def patient_balance(treatments: Iterable[Treatment]) -> PatientBalance:
    """Treatment cost minus treatment paid amounts.

    Recorded payments are not taken into account; see payments_total.
    """
    treatments = list(treatments)
    return PatientBalance(
        total_cost=sum((t.cost for t in treatments), ZERO),
        total_paid=sum((t.paid for t in treatments), ZERO),
    )


def payments_total(payments: Iterable[Payment]) -> Decimal:
    """Sum of recorded payment amounts."""
    return sum((p.amount for p in payments), ZERO)


def compute_invoice(
    treatments: Iterable[Treatment], payments: Iterable[Payment], tax_rate: Decimal
) -> InvoiceTotals:
    """Compute invoice totals.

    Args:
        treatments: Treatments billed on the invoice
        payments: Payments credited on the invoice
        tax_rate: Tax rate in percent

    Returns:
        InvoiceTotals; balance is negative when the patient overpaid
    """
    subtotal = sum((t.cost for t in treatments), ZERO)
    tax = subtotal * (Decimal(tax_rate) / 100)
    return InvoiceTotals(
        subtotal=subtotal,
        tax_rate=Decimal(tax_rate),
        tax=tax,
        total=subtotal + tax,
        amount_paid=payments_total(payments),
    )


def plan_total(procedures: Iterable[PlannedProcedure]) -> Decimal:
    """Sum of plan line costs."""
    return sum((Decimal(line.cost) for line in procedures), ZERO)

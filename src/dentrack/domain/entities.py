"""Domain model entities for dentrack.

These are pure data classes representing practice records, independent of
how they are persisted. Cross-record links (patient_id, treatment_id,
procedure_id) are weak references: an id to look up, with no ownership and
no cascading delete.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Optional


class TreatmentStatus(str, Enum):
    """Progress of a treatment."""

    COMPLETED = "completed"
    PLANNED = "planned"
    ONGOING = "ongoing"


class AppointmentStatus(str, Enum):
    """Outcome of an appointment."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


class PaymentMethod(str, Enum):
    """How a payment was made."""

    CASH = "cash"
    CARD = "card"
    INSURANCE = "insurance"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class Patient:
    """Patient domain entity."""

    id: str
    first_name: str
    last_name: str
    phone: str
    created_at: datetime
    date_of_birth: Optional[date] = None
    email: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    medical_history: Optional[str] = None
    allergies: Optional[str] = None
    insurance: Optional[str] = None
    last_visit: Optional[date] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Treatment:
    """Treatment domain entity."""

    id: str
    patient_id: str
    date: date
    procedure: str
    cost: Decimal
    paid: Decimal
    status: TreatmentStatus
    notes: str = ""
    tooth: Optional[str] = None

    @property
    def outstanding(self) -> Decimal:
        return self.cost - self.paid


@dataclass(frozen=True)
class Appointment:
    """Appointment domain entity.

    patient_name is a snapshot taken when the appointment was booked and is
    not updated when the patient is renamed.
    """

    id: str
    patient_id: str
    patient_name: str
    date: date
    time: str
    duration: int
    type: str
    status: AppointmentStatus
    notes: str = ""
    chair: Optional[str] = None


@dataclass(frozen=True)
class Payment:
    """Payment domain entity."""

    id: str
    patient_id: str
    date: date
    amount: Decimal
    method: PaymentMethod
    notes: str = ""
    treatment_id: Optional[str] = None


@dataclass(frozen=True)
class ProcedureTemplate:
    """Reusable procedure definition with a default price."""

    id: str
    name: str
    default_cost: Decimal
    category: str
    code: Optional[str] = None
    duration: Optional[int] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class PlannedProcedure:
    """One line of a treatment plan, copied from a template when planned."""

    procedure_id: str
    procedure_name: str
    cost: Decimal
    tooth: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class TreatmentPlan:
    """Treatment plan domain entity.

    total_cost is the sum of procedure costs at the time the plan was saved.
    """

    id: str
    name: str
    description: str
    procedures: tuple[PlannedProcedure, ...] = ()
    total_cost: Decimal = Decimal("0")


@dataclass(frozen=True)
class UserPreferences:
    """Application preferences singleton."""

    primary_color: str = "200 98% 39%"
    show_revenue: bool = True
    tax_rate: Decimal = Decimal("0")


@dataclass(frozen=True)
class DashboardStats:
    """Practice-wide figures for the dashboard."""

    total_patients: int
    new_patients_this_month: int
    today_appointments: int
    month_revenue: Decimal
    last_month_revenue: Decimal
    pending_payments: Decimal
    completed_treatments: int

    @property
    def revenue_growth(self) -> Decimal:
        """Month-over-month revenue change in percent, 0 without last month's revenue."""
        if self.last_month_revenue <= 0:
            return Decimal("0")
        change = (self.month_revenue - self.last_month_revenue) / self.last_month_revenue * 100
        return change.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PatientBalance:
    """Treatment-based balance for one patient."""

    total_cost: Decimal
    total_paid: Decimal

    @property
    def balance(self) -> Decimal:
        return self.total_cost - self.total_paid


@dataclass(frozen=True)
class InvoiceTotals:
    """Computed invoice figures. balance is negative on overpayment."""

    subtotal: Decimal
    tax_rate: Decimal
    tax: Decimal
    total: Decimal
    amount_paid: Decimal

    @property
    def balance(self) -> Decimal:
        return self.total - self.amount_paid

"""Repository: the one object that owns the key/value space for a process."""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from dentrack.domain import aggregation
from dentrack.domain.access import AccessGate
from dentrack.domain.backup import BackupService
from dentrack.domain.entities import DashboardStats, InvoiceTotals, PatientBalance
from dentrack.domain.errors import NotFoundError, patient_not_found
from dentrack.domain.preferences import PreferencesStore
from dentrack.domain.stores import (
    AppointmentStore,
    PatientStore,
    PaymentStore,
    ProcedureTemplateStore,
    TreatmentPlanStore,
    TreatmentStore,
)
from dentrack.storage import keys
from dentrack.storage.base import KeyValueStore
from dentrack.storage.codec import RecordCodec


class Repository:
    """Entry point to every store, the backup service and the aggregations.

    Create one per process and pass it to whatever needs the data. Nothing
    else should read or write the key/value space directly.
    """

    def __init__(self, store: KeyValueStore):
        """Initialize repository.

        Args:
            store: Backing key/value store
        """
        self.store = store
        self.codec = RecordCodec(store)
        self.patients = PatientStore(self.codec)
        self.treatments = TreatmentStore(self.codec)
        self.appointments = AppointmentStore(self.codec)
        self.payments = PaymentStore(self.codec)
        self.procedures = ProcedureTemplateStore(self.codec)
        self.treatment_plans = TreatmentPlanStore(self.codec)
        self.preferences = PreferencesStore(store)
        self.access = AccessGate(store)
        self.backup = BackupService(
            store,
            patients=self.patients,
            treatments=self.treatments,
            appointments=self.appointments,
            payments=self.payments,
        )
        self.access.initialize()

    def dashboard(self, today: Optional[date] = None) -> DashboardStats:
        """Dashboard statistics for the month containing today."""
        return aggregation.dashboard_stats(
            patients=self.patients.get_all(),
            appointments=self.appointments.get_all(),
            payments=self.payments.get_all(),
            treatments=self.treatments.get_all(),
            today=today or date.today(),
        )

    def patient_balance(self, patient_id: str) -> PatientBalance:
        """Treatment-based balance for one patient."""
        return aggregation.patient_balance(self.treatments.get_by_patient(patient_id))

    def patient_payments_total(self, patient_id: str) -> Decimal:
        """Sum of payments recorded for one patient."""
        return aggregation.payments_total(self.payments.get_by_patient(patient_id))

    def invoice(
        self, patient_id: str, treatment_ids: Optional[Iterable[str]] = None
    ) -> InvoiceTotals:
        """Invoice totals for a patient at the configured tax rate.

        Args:
            patient_id: Patient to bill
            treatment_ids: Limit the invoice to these treatments (default: all)

        Raises:
            NotFoundError: If the patient does not exist
        """
        if self.patients.get_by_id(patient_id) is None:
            raise NotFoundError(patient_not_found(patient_id))

        treatments = self.treatments.get_by_patient(patient_id)
        if treatment_ids is not None:
            wanted = set(treatment_ids)
            treatments = [t for t in treatments if t.id in wanted]

        return aggregation.compute_invoice(
            treatments,
            self.payments.get_by_patient(patient_id),
            self.preferences.get().tax_rate,
        )

    def storage_usage(self) -> dict[str, int]:
        """Persisted size in bytes of every known key."""
        usage = {key: self.codec.stored_size(key) for key in keys.CLEARABLE_KEYS}
        usage[keys.PASSWORD] = self.codec.stored_size(keys.PASSWORD)
        return usage

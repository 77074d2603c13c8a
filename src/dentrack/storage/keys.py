"""Storage key names for every persisted value."""

PATIENTS = "dental_patients"
TREATMENTS = "dental_treatments"
APPOINTMENTS = "dental_appointments"
PAYMENTS = "dental_payments"
PREFERENCES = "dental_preferences"
PROCEDURES = "dental_procedures"
TREATMENT_PLANS = "dental_treatment_plans"
PASSWORD = "dental_app_password"

# Keys removed by a full clear. The password is kept.
CLEARABLE_KEYS = (
    PATIENTS,
    TREATMENTS,
    APPOINTMENTS,
    PAYMENTS,
    PREFERENCES,
    PROCEDURES,
    TREATMENT_PLANS,
)

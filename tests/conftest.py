"""Shared pytest fixtures for dentrack tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from dentrack.domain.entities import AppointmentStatus, PaymentMethod, TreatmentStatus
from dentrack.domain.repository import Repository
from dentrack.storage.factories import create_sqlite_store


@pytest.fixture
def temp_store():
    """Create a temporary SQLite key/value store for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path)
    # Store the path for tests that need it
    store.database_path = db_path
    store.connect()

    yield store

    # Cleanup
    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def small_store():
    """A store with a tiny capacity, for quota tests."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path, capacity_bytes=2048)
    store.connect()

    yield store

    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def repo(temp_store):
    """Create a Repository over the temporary store."""
    return Repository(temp_store)


@pytest.fixture
def sample_patient(repo):
    """Create a sample patient."""
    return repo.patients.add(
        first_name="Ana",
        last_name="Diaz",
        phone="555-0101",
        email="ana@example.com",
        allergies="Penicillin",
    )


@pytest.fixture
def sample_treatments(repo, sample_patient):
    """Two treatments for the sample patient."""
    return [
        repo.treatments.add(
            patient_id=sample_patient.id,
            date=date(2024, 3, 4),
            procedure="Filling",
            cost=Decimal("100"),
            paid=Decimal("40"),
            status=TreatmentStatus.COMPLETED,
            tooth="14",
        ),
        repo.treatments.add(
            patient_id=sample_patient.id,
            date=date(2024, 3, 18),
            procedure="Cleaning",
            cost=Decimal("50"),
            paid=Decimal("0"),
            status=TreatmentStatus.PLANNED,
        ),
    ]


@pytest.fixture
def sample_payment(repo, sample_patient):
    """A payment from the sample patient."""
    return repo.payments.add(
        patient_id=sample_patient.id,
        date=date(2024, 3, 4),
        amount=Decimal("60"),
        method=PaymentMethod.CARD,
    )


@pytest.fixture
def sample_appointment(repo, sample_patient):
    """An appointment for the sample patient."""
    return repo.appointments.add(
        patient_id=sample_patient.id,
        patient_name=sample_patient.full_name,
        date=date(2024, 3, 20),
        time="09:30",
        duration=30,
        type="Checkup",
        status=AppointmentStatus.SCHEDULED,
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()

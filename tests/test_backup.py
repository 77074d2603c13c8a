"""Tests for backup export, import and clear."""

import json
from datetime import date
from decimal import Decimal

import pytest

from dentrack.domain.backup import backup_filename, export_timestamp, patients_filename
from dentrack.domain.errors import InvalidBackupFormat, InvalidPatientsFormat, StorageQuotaExceeded
from dentrack.domain.repository import Repository
from dentrack.storage import keys
from dentrack.storage.factories import create_sqlite_store


@pytest.fixture
def other_repo(tmp_path):
    """A second, empty repository to import into."""
    store = create_sqlite_store(database_path=str(tmp_path / "other.db"))
    store.connect()
    yield Repository(store)
    store.disconnect()


class TestExport:
    """Tests for export_all and export_patients."""

    def test_export_all_shape(self, repo, sample_patient, sample_treatments, sample_payment, sample_appointment):
        document = json.loads(repo.backup.export_all())

        assert set(document) == {"patients", "treatments", "appointments", "payments", "exportDate"}
        assert document["patients"][0]["firstName"] == "Ana"
        assert len(document["treatments"]) == 2
        assert document["payments"][0]["amount"] == 60
        assert document["exportDate"].endswith("Z")

    def test_export_of_empty_store(self, repo):
        document = json.loads(repo.backup.export_all())
        assert document["patients"] == []
        assert document["payments"] == []

    def test_export_patients_only(self, repo, sample_patient, sample_payment):
        document = json.loads(repo.backup.export_patients())
        assert set(document) == {"patients", "exportDate"}
        assert document["patients"][0]["id"] == sample_patient.id

    def test_export_is_indented(self, repo, sample_patient):
        assert "\n  " in repo.backup.export_all()

    def test_templates_and_plans_are_not_exported(self, repo):
        repo.procedures.add(name="Scaling", default_cost=80, category="Preventive")
        document = json.loads(repo.backup.export_all())
        assert "procedures" not in document


class TestImport:
    """Tests for import_all and import_patients."""

    def test_round_trip(self, repo, other_repo, sample_patient, sample_treatments, sample_payment, sample_appointment):
        other_repo.backup.import_all(repo.backup.export_all())

        assert other_repo.patients.get_all() == [sample_patient]
        assert other_repo.treatments.get_all() == sample_treatments
        assert other_repo.payments.get_all() == [sample_payment]
        assert other_repo.appointments.get_all() == [sample_appointment]

    def test_import_replaces_existing_collection(self, repo, sample_patient):
        repo.backup.import_all(json.dumps({"patients": []}))
        assert repo.patients.get_all() == []

    def test_absent_collections_are_untouched(self, repo, sample_patient, sample_payment):
        repo.backup.import_all(json.dumps({"treatments": [], "payments": None}))

        assert repo.patients.get_all() == [sample_patient]
        assert repo.payments.get_all() == [sample_payment]
        assert repo.treatments.get_all() == []

    def test_imports_browser_export(self, other_repo):
        document = {
            "patients": [
                {
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
                    "allergies": "",
                    "insurance": "",
                    "createdAt": "2024-04-05T10:15:30.123Z",
                }
            ],
            "payments": [
                {
                    "id": "1712345678999",
                    "patientId": "1712345678901",
                    "date": "2024-04-05",
                    "amount": 75.5,
                    "method": "card",
                    "notes": "",
                }
            ],
            "exportDate": "2024-04-06T08:00:00.000Z",
        }
        other_repo.backup.import_all(json.dumps(document))

        assert other_repo.patients.get_by_id("1712345678901").full_name == "Ana Diaz"
        assert other_repo.patient_payments_total("1712345678901") == Decimal("75.5")

    @pytest.mark.parametrize("document", ["not json", "[1, 2]", "null", '"text"'])
    def test_unparseable_document(self, repo, document):
        with pytest.raises(InvalidBackupFormat, match="Invalid backup file format"):
            repo.backup.import_all(document)

    def test_invalid_record_writes_nothing(self, repo, sample_patient, sample_payment):
        document = json.loads(repo.backup.export_all())
        document["patients"] = []
        document["payments"][0]["method"] = "bitcoin"

        with pytest.raises(InvalidBackupFormat, match="payments"):
            repo.backup.import_all(json.dumps(document))

        assert repo.patients.get_all() == [sample_patient]
        assert repo.payments.get_all() == [sample_payment]

    @pytest.mark.parametrize("literal", ["Infinity", "NaN"])
    def test_non_finite_numbers_write_nothing(self, repo, sample_appointment, sample_payment, literal):
        document = json.loads(repo.backup.export_all())
        document["appointments"][0]["duration"] = 0
        document["payments"] = []
        text = json.dumps(document).replace('"duration": 0', '"duration": ' + literal)

        with pytest.raises(InvalidBackupFormat, match="appointments"):
            repo.backup.import_all(text)

        assert repo.appointments.get_all() == [sample_appointment]
        assert repo.payments.get_all() == [sample_payment]

    def test_collection_must_be_a_list(self, repo, sample_patient):
        with pytest.raises(InvalidBackupFormat):
            repo.backup.import_all(json.dumps({"patients": {"id": "x"}}))
        assert repo.patients.get_all() == [sample_patient]

    def test_import_patients(self, repo, other_repo, sample_patient, sample_payment):
        other_repo.backup.import_patients(repo.backup.export_patients())

        assert other_repo.patients.get_all() == [sample_patient]
        assert other_repo.payments.get_all() == []

    def test_import_patients_ignores_other_collections(self, repo, other_repo, sample_patient, sample_payment):
        other_repo.backup.import_patients(repo.backup.export_all())
        assert other_repo.payments.get_all() == []

    def test_import_patients_invalid(self, repo):
        with pytest.raises(InvalidPatientsFormat, match="Invalid patients file format"):
            repo.backup.import_patients("{")

    def test_import_over_quota_writes_nothing(self, small_store, repo, sample_patient):
        target = Repository(small_store)
        document = json.loads(repo.backup.export_all())
        document["patients"] = document["patients"] * 40

        with pytest.raises(StorageQuotaExceeded):
            target.backup.import_all(json.dumps(document))
        assert target.patients.get_all() == []


class TestClearAll:
    """Tests for clear_all."""

    def test_clears_data_but_keeps_password(self, repo, temp_store, sample_patient, sample_treatments, sample_payment):
        repo.preferences.set(show_revenue=False)
        repo.procedures.add(name="Scaling", default_cost=80, category="Preventive")
        repo.access.change("admin123", "secret1")

        repo.backup.clear_all()

        for key in keys.CLEARABLE_KEYS:
            assert temp_store.get(key) is None
        assert repo.patients.get_all() == []
        assert repo.preferences.get().show_revenue is True
        assert repo.access.verify("secret1")

    def test_clear_empty_store(self, repo):
        repo.backup.clear_all()
        assert repo.patients.get_all() == []


def test_filenames():
    assert backup_filename(date(2024, 3, 4)) == "dental-backup-2024-03-04.json"
    assert patients_filename(date(2024, 3, 4)) == "dental-patients-2024-03-04.json"


def test_export_timestamp_format():
    stamp = export_timestamp()
    assert stamp.endswith("Z")
    assert len(stamp) == len("2024-04-06T08:00:00.000Z")

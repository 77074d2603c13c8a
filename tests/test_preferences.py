"""Tests for the preferences store."""

import json
from decimal import Decimal

import pytest

from dentrack.domain.entities import UserPreferences
from dentrack.domain.errors import ValidationError
from dentrack.storage import keys


def test_defaults_when_nothing_stored(repo):
    prefs = repo.preferences.get()
    assert prefs == UserPreferences()
    assert prefs.primary_color == "200 98% 39%"
    assert prefs.show_revenue is True
    assert prefs.tax_rate == Decimal("0")


def test_set_merges_into_current(repo, temp_store):
    repo.preferences.set(show_revenue=False)
    repo.preferences.set(tax_rate="10")

    prefs = repo.preferences.get()
    assert prefs.show_revenue is False
    assert prefs.tax_rate == Decimal("10")
    assert prefs.primary_color == "200 98% 39%"
    assert json.loads(temp_store.get(keys.PREFERENCES))["showRevenue"] is False


def test_partial_stored_record_uses_defaults(repo, temp_store):
    temp_store.set(keys.PREFERENCES, json.dumps({"primaryColor": "10 50% 50%"}))
    prefs = repo.preferences.get()
    assert prefs.primary_color == "10 50% 50%"
    assert prefs.show_revenue is True


def test_corrupt_record_gives_defaults(repo, temp_store):
    temp_store.set(keys.PREFERENCES, "{oops")
    assert repo.preferences.get() == UserPreferences()


@pytest.mark.parametrize(
    "changes",
    [
        {"show_revenue": "no"},
        {"primary_color": 12},
        {"tax_rate": -5},
        {"font": "Comic Sans"},
    ],
)
def test_invalid_changes_are_rejected(repo, changes):
    with pytest.raises(ValidationError):
        repo.preferences.set(**changes)
    assert repo.preferences.get() == UserPreferences()

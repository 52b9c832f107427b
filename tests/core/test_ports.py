# tests/core/test_ports.py
# Reloj, calendario de fechas bloqueadas, almacén en memoria y política de DATABASE_URL.

from datetime import date, datetime

import pytest

from app.admission.guest_list import new_list
from app.admission.memory import InMemoryGuestListStore
from app.admission.ports import ConfiguredRestrictedDates, FixedClock, SystemClock
from app.admission.results import PersistenceFailure
from app.db import _resolve_database_url


def test_restricted_dates_yearly_and_exact():
    policy = ConfiguredRestrictedDates(["12-25", "2025-07-09", "02-29"])
    assert policy.is_restricted(date(2030, 12, 25))
    assert policy.is_restricted(date(2025, 7, 9))
    assert not policy.is_restricted(date(2026, 7, 9))
    assert policy.is_restricted(date(2024, 2, 29))


def test_invalid_restricted_entries_are_ignored():
    policy = ConfiguredRestrictedDates(["13-40", "mañana", "01-01"])
    assert policy.yearly == {(1, 1)}
    assert policy.exact == set()


def test_default_restricted_dates_come_from_config():
    policy = ConfiguredRestrictedDates()
    assert policy.is_restricted(date(2025, 1, 1))


def test_clocks():
    fixed = FixedClock(datetime(2025, 6, 10, 23, 59))
    fixed.advance(minutes=2)
    assert fixed.now().date() == date(2025, 6, 11)
    assert SystemClock().now().tzinfo is not None


def test_memory_store_returns_copies(today):
    store = InMemoryGuestListStore()
    saved = store.put(new_list(1, today))
    saved.responding_member_has_entered = True
    assert store.get(1, today).responding_member_has_entered is False
    assert [gl.titular_id for gl in store.for_date(today)] == [1]


def test_memory_store_rejects_stale_version(today):
    store = InMemoryGuestListStore()
    first = store.put(new_list(1, today))
    store.put(first)
    with pytest.raises(PersistenceFailure):
        store.put(first)


def test_database_url_policy(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("FORCE_DB", "postgres")
    with pytest.raises(RuntimeError):
        _resolve_database_url()

    monkeypatch.setenv("FORCE_DB", "sqlite")
    assert _resolve_database_url().startswith("sqlite:///")

    monkeypatch.setenv("DATABASE_URL", "${{Postgres.DATABASE_URL}}")
    assert _resolve_database_url().endswith("club.db")

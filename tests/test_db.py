import sqlite3
from datetime import date

import pytest

from core.db import db_init_spin_records, db_spin_record_clear, db_spin_record_get, db_spin_record_set
from core.roulette.eligibility import EligibilityGate, LockedAlreadySpun, Unlocked
from core.roulette.records import DbSpinRecordStore, SpinRecord
from core.state import AppState

from conftest import TZ, at


@pytest.fixture
def state(tmp_path):
    s = AppState(db_path=str(tmp_path / "roulette.sqlite3"), restaurants_path="")
    db_init_spin_records(s)
    return s


def test_set_get_overwrite_clear(state):
    assert db_spin_record_get(state, 1) is None
    db_spin_record_set(state, 1, date(2025, 5, 24))
    db_spin_record_set(state, 1, date(2025, 5, 25))
    assert db_spin_record_get(state, 1) == date(2025, 5, 25)
    assert db_spin_record_get(state, 2) is None
    assert db_spin_record_clear(state, 1) is True
    assert db_spin_record_clear(state, 1) is False
    assert db_spin_record_get(state, 1) is None


def test_garbage_day_reads_as_missing(state):
    with sqlite3.connect(state.db_path) as conn:
        conn.execute("INSERT INTO spin_records VALUES ('3', 'yesterday', 0)")
    assert db_spin_record_get(state, 3) is None


def test_gate_survives_restart(state):
    gate = EligibilityGate(DbSpinRecordStore(state, 42), tz=TZ)
    gate.record_spin(at(hour=3))

    restarted = EligibilityGate(DbSpinRecordStore(state, 42), tz=TZ)
    assert restarted.last_spin_date == date(2025, 5, 25)
    assert isinstance(restarted.check(at(hour=5)), LockedAlreadySpun)

    restarted.reset()
    assert DbSpinRecordStore(state, 42).load() is None
    assert EligibilityGate(DbSpinRecordStore(state, 42), tz=TZ).check(at(hour=5)) == Unlocked()


def test_store_round_trip(state):
    store = DbSpinRecordStore(state, 7)
    store.save(SpinRecord(last_spin_date=date(2025, 1, 2)))
    assert store.load() == SpinRecord(last_spin_date=date(2025, 1, 2))

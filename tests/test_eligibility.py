from datetime import date, datetime, timezone

import pytest

from core.roulette.eligibility import (
    EligibilityGate,
    LockedAlreadySpun,
    LockedForWindow,
    Unlocked,
    in_window,
)
from core.roulette.records import MemorySpinRecordStore, SpinRecord

from conftest import TZ, at


@pytest.mark.parametrize("hour", [0, 3, 9, 10, 15, 23])
def test_already_spun_today_locks_until_midnight(hour):
    store = MemorySpinRecordStore(SpinRecord(last_spin_date=date(2025, 5, 25)))
    gate = EligibilityGate(store, start_hour=0, end_hour=10, tz=TZ)

    state = gate.check(at(hour=hour, minute=30))

    assert isinstance(state, LockedAlreadySpun)
    assert state.until == datetime(2025, 5, 26, 0, 0, 0, tzinfo=TZ)


@pytest.mark.parametrize(
    "hour, expected",
    [
        (3, Unlocked()),
        (10, LockedForWindow(until=datetime(2025, 5, 26, 0, 0, tzinfo=TZ))),
        (23, LockedForWindow(until=datetime(2025, 5, 26, 0, 0, tzinfo=TZ))),
    ],
)
def test_window_without_prior_spin(gate, hour, expected):
    assert gate.check(at(hour=hour)) == expected


def test_window_opens_later_today(store):
    gate = EligibilityGate(store, start_hour=22, end_hour=4, tz=TZ)
    assert gate.check(at(hour=15)) == LockedForWindow(until=datetime(2025, 5, 25, 22, 0, tzinfo=TZ))
    assert gate.check(at(hour=23)) == Unlocked()
    assert gate.check(at(hour=2)) == Unlocked()
    assert isinstance(gate.check(at(hour=4)), LockedForWindow)


def test_in_window_half_open():
    assert in_window(0, 0, 10)
    assert in_window(9, 0, 10)
    assert not in_window(10, 0, 10)
    assert in_window(12, 5, 5)  # whole day
    assert in_window(23, 0, 24)


def test_yesterdays_spin_does_not_lock(store):
    store.save(SpinRecord(last_spin_date=date(2025, 5, 24)))
    gate = EligibilityGate(store, start_hour=0, end_hour=10, tz=TZ)
    assert gate.check(at(hour=3)) == Unlocked()


def test_record_spin_persists_and_locks(gate, store):
    state = gate.record_spin(at(hour=3))

    assert store.load() == SpinRecord(last_spin_date=date(2025, 5, 25))
    assert gate.last_spin_date == date(2025, 5, 25)
    assert state == LockedAlreadySpun(until=datetime(2025, 5, 26, tzinfo=TZ))
    # next day inside the window it opens again
    assert gate.check(at(day=26, hour=1)) == Unlocked()


def test_record_is_read_once_at_startup(store):
    gate = EligibilityGate(store, tz=TZ)
    store.save(SpinRecord(last_spin_date=date(2025, 5, 25)))
    assert gate.check(at(hour=3)) == Unlocked()
    assert EligibilityGate(store, tz=TZ).check(at(hour=3)) != Unlocked()


@pytest.mark.parametrize("prior", [None, date(2025, 5, 25), date(2025, 5, 20)])
def test_reset_always_unlocks_and_clears(prior):
    store = MemorySpinRecordStore(SpinRecord(prior) if prior else None)
    gate = EligibilityGate(store, tz=TZ)

    assert gate.reset() == Unlocked()
    assert store.load() is None
    assert gate.last_spin_date is None


def test_naive_datetimes_are_local(gate):
    gate.record_spin(datetime(2025, 5, 25, 3, 0))
    state = gate.check(datetime(2025, 5, 25, 8, 0))
    assert state.until == datetime(2025, 5, 26, tzinfo=TZ)


def test_other_timezones_are_converted(gate):
    # 02:00 UTC on the 26th is still the evening of the 25th in New York
    utc = datetime(2025, 5, 26, 2, 0, tzinfo=timezone.utc)
    assert gate.check(utc) == LockedForWindow(until=datetime(2025, 5, 26, 0, 0, tzinfo=TZ))


def test_seconds_remaining(gate):
    assert gate.seconds_remaining(at(hour=3)) == 0.0
    gate.record_spin(at(hour=3))
    assert gate.seconds_remaining(at(hour=23, minute=59, second=30)) == pytest.approx(30.0)


def test_bad_window_rejected(store):
    with pytest.raises(ValueError):
        EligibilityGate(store, start_hour=25, end_hour=3)


def test_lock_messages_are_human():
    until = datetime(2025, 5, 26, tzinfo=TZ)
    assert "00:00" in LockedForWindow(until).message
    assert LockedAlreadySpun(until).message
    assert Unlocked().message


def test_seconds_remaining_on_spring_forward_day(gate):
    # 2025-03-09 loses an hour at 02:00, so midnight is 22 real hours after 01:00 EST
    now = datetime(2025, 3, 9, 1, 0, tzinfo=TZ)
    state = gate.record_spin(now)

    assert state.until == datetime(2025, 3, 10, tzinfo=TZ)
    assert gate.seconds_remaining(now) == pytest.approx(22 * 3600)
    assert gate.seconds_remaining(now) == pytest.approx(state.until.timestamp() - now.timestamp())


def test_seconds_remaining_on_fall_back_day(gate):
    # 2025-11-02 repeats 01:00-02:00, so 00:30 EDT is 24.5 real hours from midnight
    now = datetime(2025, 11, 2, 0, 30, tzinfo=TZ)
    state = gate.record_spin(now)

    assert state.until == datetime(2025, 11, 3, tzinfo=TZ)
    assert gate.seconds_remaining(now) == pytest.approx(24.5 * 3600)


def test_seconds_until_close(store):
    gate = EligibilityGate(store, start_hour=0, end_hour=10, tz=TZ)
    assert gate.seconds_until_close(at(hour=9, minute=59)) == pytest.approx(60.0)

    overnight = EligibilityGate(store, start_hour=22, end_hour=4, tz=TZ)
    assert overnight.seconds_until_close(at(hour=23)) == pytest.approx(5 * 3600)


@pytest.mark.parametrize("start, end", [(0, 24), (6, 6)])
def test_whole_day_window_never_closes(store, start, end):
    gate = EligibilityGate(store, start_hour=start, end_hour=end, tz=TZ)
    assert gate.whole_day
    assert gate.seconds_until_close(at(hour=23)) is None

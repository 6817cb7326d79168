from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol

from core.db import db_spin_record_clear, db_spin_record_get, db_spin_record_set


@dataclass(frozen=True)
class SpinRecord:
    last_spin_date: date


class SpinRecordStore(Protocol):
    def load(self) -> Optional[SpinRecord]: ...
    def save(self, record: SpinRecord) -> None: ...
    def clear(self) -> None: ...


class MemorySpinRecordStore:
    """Keeps the record in process memory; handy for tests and previews."""

    def __init__(self, record: Optional[SpinRecord] = None):
        self.record = record

    def load(self) -> Optional[SpinRecord]:
        return self.record

    def save(self, record: SpinRecord) -> None:
        self.record = record

    def clear(self) -> None:
        self.record = None


class DbSpinRecordStore:
    """One user's spin record in the ``spin_records`` sqlite table."""

    def __init__(self, state, user_id: int):
        self.state = state
        self.user_id = user_id

    def load(self) -> Optional[SpinRecord]:
        day = db_spin_record_get(self.state, self.user_id)
        return SpinRecord(last_spin_date=day) if day else None

    def save(self, record: SpinRecord) -> None:
        db_spin_record_set(self.state, self.user_id, record.last_spin_date)

    def clear(self) -> None:
        db_spin_record_clear(self.state, self.user_id)

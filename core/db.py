import sqlite3, time
from datetime import date
from core.state import AppState

def db_init_spin_records(state: AppState):
    """Create the spin_records table if missing."""
    with sqlite3.connect(state.db_path) as conn, conn:
        conn.execute("""
        CREATE TABLE IF NOT EXISTS spin_records (
            user_id       TEXT PRIMARY KEY,
            last_spin_day TEXT NOT NULL,          -- 'YYYY-MM-DD' (roulette timezone)
            updated_ts    INTEGER NOT NULL
        );
        """)

def db_spin_record_get(state: AppState, user_id: int) -> date | None:
    with sqlite3.connect(state.db_path) as conn:
        c = conn.execute("SELECT last_spin_day FROM spin_records WHERE user_id=?", (str(user_id),))
        r = c.fetchone()
    if not r or not r[0]:
        return None
    try:
        return date.fromisoformat(str(r[0]))
    except ValueError:
        return None

def db_spin_record_set(state: AppState, user_id: int, day: date) -> None:
    """Overwrite the user's last spin day (single-row upsert)."""
    now = int(time.time())
    with sqlite3.connect(state.db_path) as conn, conn:
        conn.execute("""
            INSERT INTO spin_records (user_id, last_spin_day, updated_ts)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                last_spin_day = excluded.last_spin_day,
                updated_ts    = excluded.updated_ts;
        """, (str(user_id), day.isoformat(), now))

def db_spin_record_clear(state: AppState, user_id: int) -> bool:
    """Delete the user's spin record. Returns True if one existed."""
    with sqlite3.connect(state.db_path) as conn, conn:
        cur = conn.execute("DELETE FROM spin_records WHERE user_id=?", (str(user_id),))
        return cur.rowcount > 0

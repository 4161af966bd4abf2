# fitflow/db.py
"""
SQLite access for users, entries and chat histories.

Everything the service persists lives under DATA_DIR: the `fitflow.db` file
and the uploaded profile images next to it. Connections run in autocommit
mode; rows come back as `sqlite3.Row` so callers index them by column name.
"""
import os
import sqlite3
from pathlib import Path

DATA_DIR = Path(os.getenv("DATA_DIR", "data"))
DATA_DIR.mkdir(parents=True, exist_ok=True)

DB_PATH = DATA_DIR / "fitflow.db"

# Applied to every connection; foreign keys are off by default in SQLite.
PRAGMAS = (
    ("journal_mode", "WAL"),
    ("synchronous", "NORMAL"),
    ("foreign_keys", "ON"),
    ("busy_timeout", "5000"),
)


def connect() -> sqlite3.Connection:
    conn = sqlite3.connect(
        str(DB_PATH),
        timeout=10,
        isolation_level=None,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    for name, value in PRAGMAS:
        conn.execute(f"PRAGMA {name}={value};")
    return conn


def ping() -> bool:
    with connect() as conn:
        conn.execute("SELECT 1")
    return True

"""Database schema DDL definitions and initialization utilities.

Tables:
  - transfers: submitted transfers and their latest known chain status
  - metadata: key/value store (schema version)
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"
SCHEMA_VERSION = 1

TRANSFERS_DDL = f"""
CREATE TABLE IF NOT EXISTS transfers (
    id TEXT PRIMARY KEY,
    hash TEXT NOT NULL UNIQUE,
    from_address TEXT,
    to_address TEXT,
    amount TEXT, -- Decimal as text, no float drift
    currency TEXT,
    status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN ('pending','confirmed','failed')),
    timestamp TEXT NOT NULL, -- ISO timestamp of submission
    gas_used TEXT,
    gas_price TEXT,
    confirmations INTEGER NOT NULL DEFAULT 0 CHECK (confirmations >= 0),
    block_number INTEGER,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

TRANSFERS_STATUS_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_transfers_status ON transfers(status);"
)
TRANSFERS_TIMESTAMP_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_transfers_timestamp ON transfers(timestamp);"
)

DDL_ORDER: Sequence[str] = (
    TRANSFERS_DDL,
    METADATA_DDL,
    TRANSFERS_STATUS_INDEX_DDL,
    TRANSFERS_TIMESTAMP_INDEX_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file. Parent directories are created.
    """
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        cur.execute(
            f"""
            INSERT INTO metadata (key, value) VALUES ('schema_version', ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                updated_at = ({BASIC_UTC_NOW})
            """,
            (str(SCHEMA_VERSION),),
        )
        conn.commit()
    finally:
        conn.close()

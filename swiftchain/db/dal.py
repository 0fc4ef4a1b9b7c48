"""Data Access Layer for the local transfer history.

Responsibilities
----------------
- Upsert transfer rows keyed by id (hash is unique as well).
- Never rewrite a row whose status is already terminal.
- Filtered listing (status, free-text search) and per-status counts.
"""

from __future__ import annotations

from pathlib import Path
import sqlite3
from typing import Any, Dict, List, Optional

from .schema import init_db

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"
SEARCH_COLUMNS = ("hash", "from_address", "to_address", "amount", "currency")


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path
        init_db(db_path)

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    # ------------------------------------------------------------------
    # Writes
    def upsert_transfer(self, row: Dict[str, Any]) -> bool:
        """Insert or update a transfer row. Returns False if the stored row is terminal."""
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                INSERT INTO transfers (
                    id, hash, from_address, to_address, amount, currency, status,
                    timestamp, gas_used, gas_price, confirmations, block_number
                )
                VALUES (
                    :id, :hash, :from_address, :to_address, :amount, :currency, :status,
                    :timestamp, :gas_used, :gas_price, :confirmations, :block_number
                )
                ON CONFLICT(id) DO UPDATE SET
                    from_address = excluded.from_address,
                    to_address = excluded.to_address,
                    amount = excluded.amount,
                    currency = excluded.currency,
                    status = excluded.status,
                    gas_used = excluded.gas_used,
                    gas_price = excluded.gas_price,
                    confirmations = excluded.confirmations,
                    block_number = excluded.block_number,
                    updated_at = ({UTC_NOW_SQL})
                WHERE transfers.status NOT IN ('confirmed', 'failed')
                """,
                row,
            )
            conn.commit()
            return cur.rowcount > 0

    def delete_transfer(self, transfer_id: str) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM transfers WHERE id = ?", (transfer_id,))
            conn.commit()
            return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Reads
    def get_transfer(self, transfer_id: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM transfers WHERE id = ?", (transfer_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def get_transfer_by_hash(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM transfers WHERE lower(hash) = lower(?)", (tx_hash,))
            row = cur.fetchone()
            return dict(row) if row else None

    def list_transfers(
        self, status: Optional[str] = None, search: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        clauses: List[str] = []
        params: List[Any] = []
        if status:
            clauses.append("status = ?")
            params.append(status)
        if search:
            like = f"%{search.lower()}%"
            clauses.append(
                "(" + " OR ".join(f"lower(coalesce({c}, '')) LIKE ?" for c in SEARCH_COLUMNS) + ")"
            )
            params.extend([like] * len(SEARCH_COLUMNS))
        where = (" WHERE " + " AND ".join(clauses)) if clauses else ""
        sql = f"SELECT * FROM transfers{where} ORDER BY timestamp DESC, id DESC"
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(sql, params)
            return [dict(r) for r in cur.fetchall()]

    def count_by_status(self) -> Dict[str, int]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT status, COUNT(*) FROM transfers GROUP BY status")
            counts = {"pending": 0, "confirmed": 0, "failed": 0}
            for status, n in cur.fetchall():
                counts[status] = int(n)
            return counts

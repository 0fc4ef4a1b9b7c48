"""Local transaction history backed by SQLite.

Records are keyed by id and unique by hash. A record that reached a terminal
status (confirmed / failed) is never overwritten. Exports use the column
order of the history screen's CSV download.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from swiftchain.db.dal import Database
from swiftchain.models.constants import STATUS_ALIASES, TransferStatus
from swiftchain.models.transfer import TransferRecord

logger = logging.getLogger("swiftchain.client.history")

CSV_COLUMNS = (
    "hash",
    "from",
    "to",
    "amount",
    "currency",
    "status",
    "timestamp",
    "gasUsed",
    "gasPrice",
    "confirmations",
    "blockNumber",
)


def _to_row(record: TransferRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "hash": record.hash,
        "from_address": record.from_address,
        "to_address": record.to_address,
        "amount": None if record.amount is None else str(record.amount),
        "currency": record.currency,
        "status": record.status.value,
        "timestamp": record.timestamp.isoformat(),
        "gas_used": record.gas_used,
        "gas_price": record.gas_price,
        "confirmations": record.confirmations,
        "block_number": record.block_number,
    }


def _from_row(row: Dict[str, Any]) -> TransferRecord:
    return TransferRecord(
        id=row["id"],
        hash=row["hash"],
        from_address=row.get("from_address"),
        to_address=row.get("to_address"),
        amount=None if row.get("amount") is None else Decimal(row["amount"]),
        currency=row.get("currency"),
        status=row["status"],
        timestamp=datetime.fromisoformat(row["timestamp"]),
        gas_used=row.get("gas_used"),
        gas_price=row.get("gas_price"),
        confirmations=row.get("confirmations") or 0,
        block_number=row.get("block_number"),
    )


class TransactionHistoryStore:
    def __init__(self, db_path: Path):
        self._db = Database(db_path)

    def save(self, record: TransferRecord) -> TransferRecord:
        """Persist ``record`` and return what is stored afterwards."""
        existing = self._db.get_transfer_by_hash(record.hash)
        if existing and existing["id"] != record.id:
            record = record.model_copy(update={"id": existing["id"]})
        if not self._db.upsert_transfer(_to_row(record)):
            logger.info("transfer %s already terminal; keeping stored record", record.hash)
        return self.get(record.id) or record

    def get(self, transfer_id: str) -> Optional[TransferRecord]:
        row = self._db.get_transfer(transfer_id)
        return _from_row(row) if row else None

    def get_by_hash(self, tx_hash: str) -> Optional[TransferRecord]:
        row = self._db.get_transfer_by_hash(tx_hash)
        return _from_row(row) if row else None

    def list(self, search: Optional[str] = None, status: Optional[str] = "all") -> List[TransferRecord]:
        """Newest first. ``status`` is 'all' or a TransferStatus value ('completed' allowed)."""
        status_filter: Optional[str] = None
        if status and status.lower() != "all":
            lowered = status.lower()
            resolved = STATUS_ALIASES.get(lowered) or TransferStatus(lowered)
            status_filter = resolved.value
        rows = self._db.list_transfers(status=status_filter, search=(search or "").strip() or None)
        return [_from_row(r) for r in rows]

    def stats(self) -> Dict[str, int]:
        return self._db.count_by_status()

    def delete(self, transfer_id: str) -> bool:
        return self._db.delete_transfer(transfer_id)


def export_csv(records: Iterable[TransferRecord]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for r in records:
        writer.writerow(
            [
                r.hash,
                r.from_address or "",
                r.to_address or "",
                "" if r.amount is None else str(r.amount),
                r.currency or "",
                r.status.value,
                r.timestamp.isoformat(),
                r.gas_used or "",
                r.gas_price or "",
                r.confirmations,
                "" if r.block_number is None else r.block_number,
            ]
        )
    return buf.getvalue()


def export_filename(today: Optional[datetime] = None) -> str:
    day = (today or datetime.now()).date().isoformat()
    return f"transaction-history-{day}.csv"

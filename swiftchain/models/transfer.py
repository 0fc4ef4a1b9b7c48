from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import Field, field_validator

from .base import Money, WireModel
from .constants import STATUS_ALIASES, TransferStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TransferRecord(WireModel):
    """One submitted transfer as tracked by the client.

    Fields the chain lookup cannot know (from/to/amount/currency) are optional
    so the same shape can describe an observation returned by the backend.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    hash: str
    from_address: Optional[str] = Field(None, alias="from")
    to_address: Optional[str] = Field(None, alias="to")
    amount: Optional[Money] = None
    currency: Optional[str] = None
    status: TransferStatus = TransferStatus.PENDING
    timestamp: datetime = Field(default_factory=_utcnow)
    gas_used: Optional[str] = None
    gas_price: Optional[str] = None
    confirmations: int = Field(0, ge=0)
    block_number: Optional[int] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            lowered = v.lower()
            return STATUS_ALIASES.get(lowered, lowered)
        return v

    @field_validator("gas_used", "gas_price", mode="before")
    @classmethod
    def gas_as_text(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class TransactionOut(WireModel):
    transaction: TransferRecord

"""Wallet Bridge capability interface.

The browser wallet provider (signing, key management) is external. Adapters
implement `WalletBridge` and translate provider quirks into these calls and
into `TransactionRejected` / `WalletNotConnected` errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional, Protocol

from swiftchain.core.errors import InsufficientBalance, WalletNotConnected, WrongNetwork


@dataclass(frozen=True)
class ConnectionStatus:
    is_connected: bool = False
    account: Optional[str] = None
    is_correct_network: bool = False


@dataclass(frozen=True)
class SendResult:
    hash: str
    receipt: Dict[str, Any] = field(default_factory=dict)

    @property
    def gas_used(self) -> Optional[str]:
        value = self.receipt.get("gasUsed")
        return None if value is None else str(value)

    @property
    def gas_price(self) -> Optional[str]:
        value = self.receipt.get("gasPrice")
        return None if value is None else str(value)

    @property
    def block_number(self) -> Optional[int]:
        value = self.receipt.get("blockNumber")
        return None if value is None else int(value)

    @property
    def confirmations(self) -> int:
        return int(self.receipt.get("confirmations") or 0)


class WalletBridge(Protocol):
    async def connect(self) -> str:
        """Request account access; returns the selected account."""
        ...

    async def switch_network(self, chain_id: int) -> None: ...

    def get_status(self) -> ConnectionStatus: ...

    async def get_balance(self, address: str, asset: str) -> Decimal: ...

    async def send_transaction(self, to: str, amount: Decimal, asset: str) -> SendResult: ...


def ensure_can_send(status: ConnectionStatus, balance: Decimal, amount: Decimal, asset: str) -> None:
    """Raise the first unmet precondition for sending ``amount`` of ``asset``."""
    if not status.is_connected or not status.account:
        raise WalletNotConnected()
    if not status.is_correct_network:
        raise WrongNetwork()
    if balance < amount:
        raise InsufficientBalance(
            f"Insufficient {asset} balance. You have {balance} {asset}, need {amount} {asset}"
        )

"""Transaction status lookups behind GET /api/crypto/transaction/{hash}.

Two sources, selected by settings.chain_status_provider:
    - 'simulated': no node required; reports the transaction as confirmed
      with exactly `confirmation_threshold` confirmations.
    - 'rpc': Ethereum JSON-RPC (eth_getTransactionByHash,
      eth_getTransactionReceipt, eth_blockNumber).

The backend keeps no state between lookups; each call is a fresh read.
"""

from __future__ import annotations

import hashlib
import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from itertools import count
from typing import Any, Dict, Optional

from swiftchain.core.config import Settings
from swiftchain.core.errors import (
    ChainUnavailable,
    InvalidTransactionHash,
    TransactionNotFound,
)
from swiftchain.models.constants import TX_HASH_RE, TransferStatus
from swiftchain.models.transfer import TransferRecord
from swiftchain.services.http_client import HttpError, post_json

logger = logging.getLogger("swiftchain.chain")

WEI_PER_ETH = Decimal(10) ** 18
ERC20_TRANSFER_SELECTOR = "0xa9059cbb"


def validate_tx_hash(tx_hash: str) -> str:
    if not TX_HASH_RE.match(tx_hash or ""):
        raise InvalidTransactionHash()
    return tx_hash.lower()


class ChainStatusSource(ABC):
    def __init__(self, confirmation_threshold: int = 12):
        self.confirmation_threshold = confirmation_threshold

    def lookup(self, tx_hash: str) -> TransferRecord:
        return self._lookup(validate_tx_hash(tx_hash))

    @abstractmethod
    def _lookup(self, tx_hash: str) -> TransferRecord:
        raise NotImplementedError


class SimulatedChainStatusSource(ChainStatusSource):
    def _lookup(self, tx_hash: str) -> TransferRecord:  # type: ignore[override]
        digest = hashlib.sha256(tx_hash.encode("ascii")).hexdigest()
        return TransferRecord(
            id=tx_hash,
            hash=tx_hash,
            status=TransferStatus.CONFIRMED,
            confirmations=self.confirmation_threshold,
            block_number=5_000_000 + int(digest[:6], 16),
            gas_used="21000",
        )


def _hex_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    return int(value, 16)


class JsonRpcChainStatusSource(ChainStatusSource):
    def __init__(
        self,
        rpc_url: str,
        confirmation_threshold: int = 12,
        usdt_contract: Optional[str] = None,
        usdt_decimals: int = 6,
        timeout: float = 5.0,
        retries: int = 2,
    ):
        super().__init__(confirmation_threshold)
        self._url = rpc_url
        self._usdt_contract = usdt_contract.lower() if usdt_contract else None
        self._usdt_decimals = usdt_decimals
        self._timeout = timeout
        self._retries = retries
        self._ids = count(1)

    def _call(self, method: str, *params: Any) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": list(params)}
        try:
            data = post_json(self._url, payload, timeout=self._timeout, retries=self._retries)
        except HttpError as e:
            logger.error("rpc %s failed: %s", method, e)
            raise ChainUnavailable() from e
        if not isinstance(data, dict) or data.get("error"):
            logger.error("rpc %s returned error: %r", method, data)
            raise ChainUnavailable(f"Blockchain node rejected {method}")
        return data.get("result")

    def _transfer_details(self, tx: Dict[str, Any]) -> Dict[str, Any]:
        to = (tx.get("to") or "").lower() or None
        data = tx.get("input") or "0x"
        if self._usdt_contract and to == self._usdt_contract and data.startswith(ERC20_TRANSFER_SELECTOR):
            # transfer(address,uint256): two 32-byte words after the selector
            args = data[len(ERC20_TRANSFER_SELECTOR):]
            recipient = "0x" + args[24:64]
            raw = int(args[64:128] or "0", 16)
            return {
                "to_address": recipient,
                "amount": Decimal(raw) / (Decimal(10) ** self._usdt_decimals),
                "currency": "USDT",
            }
        return {
            "to_address": tx.get("to"),
            "amount": Decimal(_hex_int(tx.get("value")) or 0) / WEI_PER_ETH,
            "currency": "ETH",
        }

    def _lookup(self, tx_hash: str) -> TransferRecord:  # type: ignore[override]
        tx = self._call("eth_getTransactionByHash", tx_hash)
        if not tx:
            raise TransactionNotFound(f"Transaction {tx_hash} not found")
        receipt = self._call("eth_getTransactionReceipt", tx_hash)
        fields: Dict[str, Any] = {
            "id": tx_hash,
            "hash": tx_hash,
            "from_address": tx.get("from"),
            "gas_price": str(_hex_int(tx.get("gasPrice")) or 0),
            **self._transfer_details(tx),
        }
        if not receipt or receipt.get("blockNumber") is None:
            return TransferRecord(status=TransferStatus.PENDING, confirmations=0, **fields)

        block = _hex_int(receipt["blockNumber"])
        latest = _hex_int(self._call("eth_blockNumber")) or block
        confirmations = max(0, latest - block + 1)
        if receipt.get("status") == "0x0":
            status = TransferStatus.FAILED
        elif confirmations >= self.confirmation_threshold:
            status = TransferStatus.CONFIRMED
        else:
            status = TransferStatus.PENDING
        effective_price = _hex_int(receipt.get("effectiveGasPrice"))
        if effective_price is not None:
            fields["gas_price"] = str(effective_price)
        return TransferRecord(
            status=status,
            confirmations=confirmations,
            block_number=block,
            gas_used=str(_hex_int(receipt.get("gasUsed")) or 0),
            **fields,
        )


def make_chain_status_source(settings: Settings) -> ChainStatusSource:
    if settings.chain_status_provider == "rpc":
        return JsonRpcChainStatusSource(
            str(settings.chain_rpc_url),
            confirmation_threshold=settings.confirmation_threshold,
            usdt_contract=settings.usdt_contract_address,
            usdt_decimals=settings.usdt_decimals,
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
        )
    if settings.chain_status_provider == "simulated":
        return SimulatedChainStatusSource(settings.confirmation_threshold)
    raise ValueError(f"Unknown chain status provider '{settings.chain_status_provider}'")

"""Domain constants and enumerations for validation."""

import re
from enum import Enum
from typing import Dict, Set

# Fiat input currency
BASE_CURRENCY = "INR"

# Target currencies a transfer may be converted into
TRANSFER_CURRENCIES: Set[str] = {"USDT", "ETH"}

# Currency the fee comparison is computed for
COMPARISON_CURRENCY = "USDT"

# Assets quoted by the price feed, keyed by ticker -> feed id
PRICE_FEED_IDS: Dict[str, str] = {
    "USDT": "tether",
    "ETH": "ethereum",
    "BTC": "bitcoin",
}

MIN_AMOUNT_INR = "0.01"
MAX_AMOUNT_INR = "1000000000"

ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
TX_HASH_RE = re.compile(r"^0x[a-fA-F0-9]{64}$")
IFSC_RE = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")
ACCOUNT_NUMBER_RE = re.compile(r"^\d{9,18}$")


class TransferStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TransferStatus.PENDING


# Older history entries were written with 'completed'
STATUS_ALIASES: Dict[str, TransferStatus] = {
    "completed": TransferStatus.CONFIRMED,
    "success": TransferStatus.CONFIRMED,
    "reverted": TransferStatus.FAILED,
}

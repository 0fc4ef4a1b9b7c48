"""Pydantic domain models for the SwiftChain API and client."""

from .constants import (
    BASE_CURRENCY,
    TRANSFER_CURRENCIES,
    PRICE_FEED_IDS,
    TransferStatus,
)  # re-export
from .conversion import (
    ConvertIn,
    FeeBreakdown,
    ConversionResult,
    FeeComparison,
    RateSnapshot,
)
from .transfer import TransferRecord, TransactionOut
from .withdrawal import BankDetails, WithdrawalIn, WithdrawalAck

__all__ = [
    "BASE_CURRENCY",
    "TRANSFER_CURRENCIES",
    "PRICE_FEED_IDS",
    "TransferStatus",
    "ConvertIn",
    "FeeBreakdown",
    "ConversionResult",
    "FeeComparison",
    "RateSnapshot",
    "TransferRecord",
    "TransactionOut",
    "BankDetails",
    "WithdrawalIn",
    "WithdrawalAck",
]

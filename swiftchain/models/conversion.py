from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field

from .base import Money, WireModel


class ConvertIn(BaseModel):
    # Parsed by the engine; malformed amounts surface as InvalidAmount (400).
    amount: Optional[Union[float, str]] = Field(None, description="Amount in INR")
    currency: str = Field("USDT", description="Target currency (USDT or ETH)")


class FeeBreakdown(WireModel):
    swift_chain_fee: Money
    network_fee: Money
    network_fee_inr: Money
    total_fee: Money


class ConversionResult(WireModel):
    original_amount: Money
    currency: str
    converted_amount: Money
    exchange_rate: Money
    fees: FeeBreakdown
    net_amount: Money


class BankCostModel(WireModel):
    flat_fee: Money
    percentage_fee: Money
    total_cost: Money
    estimated_delay: str


class SwiftChainCostModel(WireModel):
    platform_fee: Money
    network_fee: Money
    total_cost: Money
    estimated_delay: str


class FeeComparison(WireModel):
    amount: Money
    traditional_bank_cost: Money
    swift_chain_cost: Money
    savings: Money
    savings_percentage: Money
    traditional_bank: BankCostModel
    swift_chain: SwiftChainCostModel


class RateSnapshot(WireModel):
    """INR prices keyed by feed id, e.g. {"tether": {"inr": 83.5}}."""

    rates: Dict[str, Dict[str, Money]]
    timestamp: datetime

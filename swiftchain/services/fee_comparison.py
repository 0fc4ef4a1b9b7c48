"""Traditional bank transfer vs SwiftChain cost comparison.

Bank model: flat fee + percentage of the amount (delay is informational).
SwiftChain model: the conversion engine's total fee for the comparison
currency at the live rate. Savings percentage is relative to the bank cost
and is 0 when the bank cost is 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from swiftchain.core.config import Settings
from swiftchain.models.constants import COMPARISON_CURRENCY
from swiftchain.models.conversion import (
    BankCostModel,
    FeeBreakdown,
    FeeComparison,
    SwiftChainCostModel,
)
from swiftchain.services.conversion import ConversionEngine, parse_amount
from swiftchain.services.money import round2


@dataclass(frozen=True)
class BankFeeModel:
    flat_fee: Decimal = Decimal("500")
    percentage: Decimal = Decimal("0.03")
    estimated_delay: str = "3-5 business days"

    @classmethod
    def from_settings(cls, settings: Settings) -> "BankFeeModel":
        return cls(
            flat_fee=settings.bank_flat_fee,
            percentage=settings.bank_percentage_fee,
            estimated_delay=settings.bank_estimated_delay,
        )

    def cost(self, amount: Decimal) -> BankCostModel:
        percentage_fee = round2(amount * self.percentage)
        return BankCostModel(
            flat_fee=self.flat_fee,
            percentage_fee=percentage_fee,
            total_cost=round2(self.flat_fee + percentage_fee),
            estimated_delay=self.estimated_delay,
        )


def build_comparison(
    amount: Decimal,
    bank: BankCostModel,
    fees: FeeBreakdown,
    swiftchain_delay: str = "2-5 minutes",
) -> FeeComparison:
    bank_cost = bank.total_cost
    swift_cost = fees.total_fee
    savings = bank_cost - swift_cost
    if bank_cost == 0:
        pct = Decimal("0.00")
    else:
        pct = round2(savings / bank_cost * 100)
    return FeeComparison(
        amount=amount,
        traditional_bank_cost=bank_cost,
        swift_chain_cost=swift_cost,
        savings=savings,
        savings_percentage=pct,
        traditional_bank=bank,
        swift_chain=SwiftChainCostModel(
            platform_fee=fees.swift_chain_fee,
            network_fee=fees.network_fee_inr,
            total_cost=swift_cost,
            estimated_delay=swiftchain_delay,
        ),
    )


class FeeComparisonEngine:
    def __init__(
        self,
        engine: ConversionEngine,
        bank: BankFeeModel | None = None,
        currency: str = COMPARISON_CURRENCY,
        swiftchain_delay: str = "2-5 minutes",
    ):
        self._engine = engine
        self._bank = bank or BankFeeModel()
        self._currency = currency
        self._delay = swiftchain_delay

    def compare(self, amount: Any) -> FeeComparison:
        value = parse_amount(amount)
        fees = self._engine.fees_for(value, self._currency)
        return build_comparison(value, self._bank.cost(value), fees, self._delay)

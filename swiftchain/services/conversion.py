"""INR -> crypto conversion engine.

Fee arithmetic (all INR values rounded to 2 dp, ROUND_HALF_UP):
    swift_chain_fee = amount * platform_fee_rate
    network_fee_inr = network_fee (flat, in target currency) * rate
    total_fee       = swift_chain_fee + network_fee_inr
    net_amount      = amount - total_fee
    converted       = net_amount / rate, quantized to the currency precision

`convert_at_rate` is the pure core; `convert` only adds the rate lookup.
Rate lookup failures (RateUnavailable) propagate to the caller untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict

from swiftchain.core.config import Settings
from swiftchain.core.errors import InvalidAmount, RateUnavailable, UnsupportedCurrency
from swiftchain.models.constants import MAX_AMOUNT_INR, MIN_AMOUNT_INR
from swiftchain.models.conversion import ConversionResult, FeeBreakdown
from swiftchain.services.money import quantize, round2, to_decimal
from swiftchain.services.rates.base import SupportsPriceLookup

MIN_AMOUNT = Decimal(MIN_AMOUNT_INR)
MAX_AMOUNT = Decimal(MAX_AMOUNT_INR)


@dataclass(frozen=True)
class FeeSchedule:
    platform_fee_rate: Decimal = Decimal("0.01")
    network_fees: Dict[str, Decimal] = field(
        default_factory=lambda: {"USDT": Decimal("0.50"), "ETH": Decimal("0.0005")}
    )
    decimals: Dict[str, int] = field(default_factory=lambda: {"USDT": 2, "ETH": 6})

    @classmethod
    def from_settings(cls, settings: Settings) -> "FeeSchedule":
        return cls(
            platform_fee_rate=settings.platform_fee_rate,
            network_fees={k.upper(): v for k, v in settings.network_fees.items()},
            decimals={k.upper(): v for k, v in settings.currency_decimals.items()},
        )

    def check_currency(self, currency: str) -> str:
        currency = (currency or "").upper()
        if currency not in self.network_fees:
            supported = ", ".join(sorted(self.network_fees))
            raise UnsupportedCurrency(f"Unsupported currency '{currency}'. Supported: {supported}")
        return currency


def parse_amount(amount: Any) -> Decimal:
    value = to_decimal(amount)
    if value < MIN_AMOUNT:
        raise InvalidAmount(f"Amount must be at least ₹{MIN_AMOUNT_INR}")
    if value > MAX_AMOUNT:
        raise InvalidAmount(f"Amount must be at most ₹{MAX_AMOUNT_INR}")
    return value


def compute_fees(amount: Decimal, currency: str, rate: Decimal, schedule: FeeSchedule) -> FeeBreakdown:
    swift_chain_fee = round2(amount * schedule.platform_fee_rate)
    network_fee = schedule.network_fees[currency]
    network_fee_inr = round2(network_fee * rate)
    return FeeBreakdown(
        swift_chain_fee=swift_chain_fee,
        network_fee=network_fee,
        network_fee_inr=network_fee_inr,
        total_fee=swift_chain_fee + network_fee_inr,
    )


def convert_at_rate(
    amount: Any, currency: str, rate: Decimal, schedule: FeeSchedule
) -> ConversionResult:
    amount = parse_amount(amount)
    currency = schedule.check_currency(currency)
    if rate <= 0:
        raise RateUnavailable(f"Invalid exchange rate {rate} for {currency}")
    fees = compute_fees(amount, currency, rate, schedule)
    net_amount = amount - fees.total_fee
    # Fees can exceed tiny amounts; nothing is sendable then.
    converted = quantize(max(net_amount, Decimal(0)) / rate, schedule.decimals[currency])
    return ConversionResult(
        original_amount=amount,
        currency=currency,
        converted_amount=converted,
        exchange_rate=rate,
        fees=fees,
        net_amount=net_amount,
    )


class ConversionEngine:
    def __init__(self, prices: SupportsPriceLookup, schedule: FeeSchedule | None = None):
        self._prices = prices
        self.schedule = schedule or FeeSchedule()

    def rate_for(self, currency: str) -> Decimal:
        return self._prices.get_inr_price(self.schedule.check_currency(currency))

    def convert(self, amount: Any, currency: str) -> ConversionResult:
        # Validate before touching the price feed.
        parse_amount(amount)
        rate = self.rate_for(currency)
        return convert_at_rate(amount, currency, rate, self.schedule)

    def fees_for(self, amount: Any, currency: str) -> FeeBreakdown:
        value = parse_amount(amount)
        currency = self.schedule.check_currency(currency)
        return compute_fees(value, currency, self.rate_for(currency), self.schedule)

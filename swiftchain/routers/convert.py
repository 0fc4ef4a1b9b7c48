"""Conversion router.

Endpoints:
    - GET  /api/convert/rates           -> live INR prices (USDT, ETH, BTC)
    - POST /api/convert                 -> ConversionResult for {amount, currency}
    - GET  /api/convert/fee-comparison  -> bank vs SwiftChain cost for ?amount=

Handlers are plain `def` so the blocking price-feed call runs in the threadpool.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from swiftchain.core.config import Settings, get_settings
from swiftchain.models.conversion import (
    ConversionResult,
    ConvertIn,
    FeeComparison,
    RateSnapshot,
)
from swiftchain.services.conversion import ConversionEngine, FeeSchedule
from swiftchain.services.fee_comparison import BankFeeModel, FeeComparisonEngine
from swiftchain.services.rates import PriceSource, fetch_rate_snapshot, make_price_source

router = APIRouter(prefix="/api/convert", tags=["convert"])

# Dependencies -----------------------------------------------------


def get_price_source(settings: Settings = Depends(get_settings)) -> PriceSource:
    return make_price_source(settings.price_provider, settings)


def get_conversion_engine(
    prices: PriceSource = Depends(get_price_source),
    settings: Settings = Depends(get_settings),
) -> ConversionEngine:
    return ConversionEngine(prices, FeeSchedule.from_settings(settings))


def get_fee_comparison_engine(
    engine: ConversionEngine = Depends(get_conversion_engine),
    settings: Settings = Depends(get_settings),
) -> FeeComparisonEngine:
    return FeeComparisonEngine(
        engine,
        BankFeeModel.from_settings(settings),
        swiftchain_delay=settings.swiftchain_estimated_delay,
    )


# Routes -----------------------------------------------------------
@router.get("/rates", response_model=RateSnapshot, summary="Current INR prices")
def get_rates(prices: PriceSource = Depends(get_price_source)):
    return fetch_rate_snapshot(prices)


@router.post("", response_model=ConversionResult, summary="Convert INR to crypto")
def convert(payload: ConvertIn, engine: ConversionEngine = Depends(get_conversion_engine)):
    return engine.convert(payload.amount, payload.currency)


@router.get(
    "/fee-comparison",
    response_model=FeeComparison,
    summary="Compare bank transfer cost with SwiftChain cost",
)
def fee_comparison(
    amount: Optional[str] = Query(None, description="Amount in INR"),
    comparison: FeeComparisonEngine = Depends(get_fee_comparison_engine),
):
    return comparison.compare(amount)

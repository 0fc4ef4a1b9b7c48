from .base import PriceSource, SupportsPriceLookup
from .providers import (
    CoinGeckoPriceSource,
    StaticPriceSource,
    fetch_rate_snapshot,
    make_price_source,
)

__all__ = [
    "PriceSource",
    "SupportsPriceLookup",
    "CoinGeckoPriceSource",
    "StaticPriceSource",
    "fetch_rate_snapshot",
    "make_price_source",
]

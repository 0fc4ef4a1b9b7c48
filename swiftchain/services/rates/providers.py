"""Concrete price sources and factory.

'static' returns fixed demo prices so the service runs offline; 'coingecko'
asks the CoinGecko simple/price endpoint on every call.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional
from urllib.parse import urlencode

from swiftchain.core.config import Settings
from swiftchain.core.errors import RateUnavailable
from swiftchain.models.constants import PRICE_FEED_IDS
from swiftchain.models.conversion import RateSnapshot
from swiftchain.services.http_client import HttpError, get_json
from .base import PriceSource

logger = logging.getLogger("swiftchain.rates")

_STATIC_PRICES: Dict[str, Decimal] = {
    "USDT": Decimal("83.50"),
    "ETH": Decimal("250000.00"),
    "BTC": Decimal("5500000.00"),
}


def _normalize(assets: Iterable[str]) -> List[str]:
    wanted = [a.upper() for a in assets]
    unknown = [a for a in wanted if a not in PRICE_FEED_IDS]
    if unknown:
        raise RateUnavailable(f"No price feed for {', '.join(unknown)}")
    return wanted


class StaticPriceSource(PriceSource):
    def __init__(self, prices: Optional[Dict[str, Decimal]] = None):
        self._prices = {k.upper(): Decimal(v) for k, v in (prices or _STATIC_PRICES).items()}

    def get_prices(self, assets: Iterable[str]) -> Dict[str, Decimal]:  # type: ignore[override]
        wanted = _normalize(assets)
        missing = [a for a in wanted if a not in self._prices]
        if missing:
            raise RateUnavailable(f"No static price for {', '.join(missing)}")
        return {a: self._prices[a] for a in wanted}


class CoinGeckoPriceSource(PriceSource):
    """Live prices from ``/simple/price?ids=...&vs_currencies=inr``."""

    def __init__(self, base_url: str, timeout: float = 5.0, retries: int = 2):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retries = retries

    def _url(self, feed_ids: List[str]) -> str:
        query = urlencode({"ids": ",".join(feed_ids), "vs_currencies": "inr"})
        return f"{self._base_url}/simple/price?{query}"

    def get_prices(self, assets: Iterable[str]) -> Dict[str, Decimal]:  # type: ignore[override]
        wanted = _normalize(assets)
        feed_ids = [PRICE_FEED_IDS[a] for a in wanted]
        try:
            data = get_json(self._url(feed_ids), timeout=self._timeout, retries=self._retries)
        except HttpError as e:
            logger.error("price feed unreachable: %s", e)
            raise RateUnavailable("Price feed is unreachable, please retry.") from e

        prices: Dict[str, Decimal] = {}
        for asset, feed_id in zip(wanted, feed_ids):
            entry = data.get(feed_id) if isinstance(data, dict) else None
            raw = entry.get("inr") if isinstance(entry, dict) else None
            try:
                price = Decimal(str(raw))
            except (InvalidOperation, ValueError):
                price = None
            if price is None or not price.is_finite() or price <= 0:
                logger.error("malformed price for %s: %r", feed_id, entry)
                raise RateUnavailable(f"Malformed price data for {asset}")
            prices[asset] = price
        return prices


_PROVIDER_REGISTRY = {
    "static": lambda settings: StaticPriceSource(),
    "coingecko": lambda settings: CoinGeckoPriceSource(
        str(settings.price_api_base_url),
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
    ),
}


def make_price_source(kind: str, settings: Settings) -> PriceSource:
    factory = _PROVIDER_REGISTRY.get(kind)
    if not factory:
        raise ValueError(f"Unknown price provider kind '{kind}'")
    return factory(settings)


def fetch_rate_snapshot(source: PriceSource) -> RateSnapshot:
    """Current INR prices for every quoted asset, keyed by feed id."""
    prices = source.get_prices(PRICE_FEED_IDS.keys())
    return RateSnapshot(
        rates={PRICE_FEED_IDS[a]: {"inr": p} for a, p in prices.items()},
        timestamp=datetime.now(timezone.utc),
    )

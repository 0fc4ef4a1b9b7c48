"""Price source abstraction.

A price source answers "how many INR is one unit of this asset worth right
now". Nothing is cached: every call goes to the underlying feed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Iterable, Protocol


class PriceSource(ABC):
    base_currency: str = "INR"

    @abstractmethod
    def get_prices(self, assets: Iterable[str]) -> Dict[str, Decimal]:
        """Return INR per 1 unit for each ticker in ``assets``.

        Raises RateUnavailable when any requested asset cannot be priced.
        """
        raise NotImplementedError

    def get_inr_price(self, asset: str) -> Decimal:
        asset = asset.upper()
        return self.get_prices([asset])[asset]


class SupportsPriceLookup(Protocol):
    def get_inr_price(self, asset: str) -> Decimal: ...

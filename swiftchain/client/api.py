"""Async client for the SwiftChain HTTP API.

Error bodies (``{"error": code, "detail": message}``) are turned back into
the matching `SwiftChainError` subclass; transport failures and unexpected
responses surface as `ApiError`.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Union

import httpx

from swiftchain.core.errors import SwiftChainError, error_from_code
from swiftchain.models.conversion import ConversionResult, FeeComparison, RateSnapshot
from swiftchain.models.transfer import TransferRecord
from swiftchain.models.withdrawal import BankDetails, WithdrawalAck, WithdrawalIn

logger = logging.getLogger("swiftchain.client.api")

_TIMEOUT = 10.0


class ApiError(SwiftChainError):
    code = "api_error"
    default_message = "SwiftChain API request failed."


class SwiftChainAPI:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = _TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SwiftChainAPI":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise ApiError(f"Could not reach SwiftChain API: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = None

        if resp.is_error:
            if isinstance(body, dict) and isinstance(body.get("detail"), str):
                raise error_from_code(body.get("error"), body["detail"])
            raise ApiError(f"HTTP {resp.status_code} for {method} {url}")
        if not isinstance(body, dict):
            raise ApiError(f"Unexpected response body for {method} {url}")
        return body

    # Conversion ---------------------------------------------------
    async def get_rates(self) -> RateSnapshot:
        return RateSnapshot.model_validate(await self._request("GET", "/api/convert/rates"))

    async def convert(self, amount: Union[Decimal, float, str], currency: str) -> ConversionResult:
        body = await self._request(
            "POST", "/api/convert", json={"amount": str(amount), "currency": currency}
        )
        return ConversionResult.model_validate(body)

    async def get_fee_comparison(self, amount: Union[Decimal, float, str] = 10000) -> FeeComparison:
        body = await self._request(
            "GET", "/api/convert/fee-comparison", params={"amount": str(amount)}
        )
        return FeeComparison.model_validate(body)

    # Crypto -------------------------------------------------------
    async def get_transaction_status(self, tx_hash: str) -> TransferRecord:
        body = await self._request("GET", f"/api/crypto/transaction/{tx_hash}")
        return TransferRecord.model_validate(body.get("transaction") or {})

    async def simulate_withdrawal(
        self, amount: Union[Decimal, float, str], bank_details: BankDetails
    ) -> WithdrawalAck:
        payload = WithdrawalIn(amount=Decimal(str(amount)), bank_details=bank_details)
        body = await self._request(
            "POST", "/api/crypto/withdraw", json=payload.model_dump(mode="json", by_alias=True)
        )
        return WithdrawalAck.model_validate(body)

    async def health(self) -> Dict[str, Any]:
        return await self._request("GET", "/api/health")

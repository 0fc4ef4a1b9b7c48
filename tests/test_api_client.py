"""Async API client against the in-process app (httpx ASGI transport)."""

from decimal import Decimal

import httpx
import pytest

from swiftchain.client.api import ApiError, SwiftChainAPI
from swiftchain.core.errors import InvalidAmount, InvalidTransactionHash, UnsupportedCurrency
from swiftchain.models.constants import TransferStatus
from swiftchain.models.withdrawal import BankDetails

from .conftest import TX_HASH

BASE_URL = "http://testserver"


def _api(app) -> SwiftChainAPI:
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=BASE_URL)
    return SwiftChainAPI(BASE_URL, client=client)


class TestSwiftChainAPI:
    @pytest.mark.asyncio
    async def test_convert(self, app) -> None:
        async with _api(app) as api:
            result = await api.convert(Decimal("10000"), "USDT")

        assert result.converted_amount == Decimal("118.06")
        assert result.fees.total_fee == Decimal("141.75")

    @pytest.mark.asyncio
    async def test_error_bodies_map_to_domain_errors(self, app) -> None:
        async with _api(app) as api:
            with pytest.raises(InvalidAmount):
                await api.convert("abc", "USDT")
            with pytest.raises(UnsupportedCurrency):
                await api.convert(100, "DOGE")
            with pytest.raises(InvalidTransactionHash):
                await api.get_transaction_status("0x1234")

    @pytest.mark.asyncio
    async def test_rates_and_fee_comparison(self, app) -> None:
        async with _api(app) as api:
            rates = await api.get_rates()
            comparison = await api.get_fee_comparison()

        assert rates.rates["tether"]["inr"] == Decimal("83.5")
        assert comparison.savings == Decimal("658.25")
        assert comparison.savings_percentage == Decimal("82.28")

    @pytest.mark.asyncio
    async def test_transaction_status(self, app) -> None:
        async with _api(app) as api:
            record = await api.get_transaction_status(TX_HASH)

        assert record.hash == TX_HASH
        assert record.status is TransferStatus.CONFIRMED
        assert record.confirmations == 12

    @pytest.mark.asyncio
    async def test_withdrawal(self, app) -> None:
        bank = BankDetails(account_number="123456789012", ifsc_code="SBIN0001234", account_holder="Test User")
        async with _api(app) as api:
            ack = await api.simulate_withdrawal(Decimal("118.06"), bank)

        assert ack.success is True
        assert ack.status == "processing"
        assert ack.amount == Decimal("118.06")

    @pytest.mark.asyncio
    async def test_health(self, app) -> None:
        async with _api(app) as api:
            assert (await api.health())["status"] == "OK"

    @pytest.mark.asyncio
    async def test_transport_failure(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url=BASE_URL)
        async with SwiftChainAPI(BASE_URL, client=client) as api:
            with pytest.raises(ApiError, match="Could not reach"):
                await api.health()

    @pytest.mark.asyncio
    async def test_unexpected_error_body(self) -> None:
        def teapot(request: httpx.Request) -> httpx.Response:
            return httpx.Response(418, text="short and stout")

        client = httpx.AsyncClient(transport=httpx.MockTransport(teapot), base_url=BASE_URL)
        async with SwiftChainAPI(BASE_URL, client=client) as api:
            with pytest.raises(ApiError, match="HTTP 418"):
                await api.health()

"""Chain status lookups: simulated source and Ethereum JSON-RPC source."""

from decimal import Decimal
from unittest.mock import patch

import pytest

from swiftchain.core.errors import ChainUnavailable, InvalidTransactionHash, TransactionNotFound
from swiftchain.models.constants import TransferStatus
from swiftchain.models.transfer import TransactionOut, TransferRecord
from swiftchain.services.chain_status import (
    JsonRpcChainStatusSource,
    SimulatedChainStatusSource,
    make_chain_status_source,
)
from swiftchain.services.http_client import HttpError

from .conftest import RECEIVER, SENDER, TX_HASH

POST_JSON = "swiftchain.services.chain_status.post_json"
USDT_CONTRACT = "0x" + "c" * 40


def _rpc(results):
    """Fake post_json answering each JSON-RPC method from ``results``."""

    def fake_post(url, payload, **kwargs):
        return {"jsonrpc": "2.0", "id": payload["id"], "result": results[payload["method"]]}

    return fake_post


def _tx(**overrides):
    tx = {
        "hash": TX_HASH,
        "from": SENDER,
        "to": RECEIVER,
        "value": hex(10**18),
        "gasPrice": hex(2_000_000_000),
        "input": "0x",
    }
    tx.update(overrides)
    return tx


def _receipt(block: int = 100, status: str = "0x1"):
    return {"blockNumber": hex(block), "status": status, "gasUsed": hex(21000)}


class TestSimulatedSource:
    def test_reports_confirmed_at_threshold(self) -> None:
        record = SimulatedChainStatusSource(confirmation_threshold=12).lookup(TX_HASH)
        assert record.status is TransferStatus.CONFIRMED
        assert record.confirmations == 12
        assert record.hash == TX_HASH
        assert record.gas_used == "21000"

    def test_block_number_derived_from_hash(self) -> None:
        source = SimulatedChainStatusSource()
        first = source.lookup(TX_HASH).block_number
        assert first == source.lookup(TX_HASH).block_number
        assert first >= 5_000_000
        assert source.lookup("0x" + "cd" * 32).block_number != first

    def test_hash_is_normalized(self) -> None:
        record = SimulatedChainStatusSource().lookup(TX_HASH.upper().replace("0X", "0x"))
        assert record.hash == TX_HASH

    @pytest.mark.parametrize("bad", ["", "0x123", "ab" * 32, "0x" + "zz" * 32, "0x" + "ab" * 33])
    def test_invalid_hash(self, bad: str) -> None:
        with pytest.raises(InvalidTransactionHash):
            SimulatedChainStatusSource().lookup(bad)


class TestJsonRpcSource:
    def _source(self, **kwargs) -> JsonRpcChainStatusSource:
        return JsonRpcChainStatusSource("http://node.test", retries=0, **kwargs)

    def test_unknown_transaction(self) -> None:
        with patch(POST_JSON, side_effect=_rpc({"eth_getTransactionByHash": None})):
            with pytest.raises(TransactionNotFound):
                self._source().lookup(TX_HASH)

    def test_no_receipt_is_pending(self) -> None:
        results = {"eth_getTransactionByHash": _tx(), "eth_getTransactionReceipt": None}
        with patch(POST_JSON, side_effect=_rpc(results)):
            record = self._source().lookup(TX_HASH)

        assert record.status is TransferStatus.PENDING
        assert record.confirmations == 0
        assert record.block_number is None
        assert record.amount == Decimal(1)
        assert record.currency == "ETH"
        assert record.from_address == SENDER
        assert record.gas_price == "2000000000"

    def test_confirmed_at_threshold(self) -> None:
        results = {
            "eth_getTransactionByHash": _tx(),
            "eth_getTransactionReceipt": _receipt(block=100),
            "eth_blockNumber": hex(111),
        }
        with patch(POST_JSON, side_effect=_rpc(results)):
            record = self._source(confirmation_threshold=12).lookup(TX_HASH)

        assert record.status is TransferStatus.CONFIRMED
        assert record.confirmations == 12
        assert record.block_number == 100
        assert record.gas_used == "21000"

    def test_below_threshold_stays_pending(self) -> None:
        results = {
            "eth_getTransactionByHash": _tx(),
            "eth_getTransactionReceipt": _receipt(block=100),
            "eth_blockNumber": hex(104),
        }
        with patch(POST_JSON, side_effect=_rpc(results)):
            record = self._source().lookup(TX_HASH)

        assert record.status is TransferStatus.PENDING
        assert record.confirmations == 5

    def test_reverted_receipt_is_failed(self) -> None:
        results = {
            "eth_getTransactionByHash": _tx(),
            "eth_getTransactionReceipt": _receipt(block=100, status="0x0"),
            "eth_blockNumber": hex(200),
        }
        with patch(POST_JSON, side_effect=_rpc(results)):
            record = self._source().lookup(TX_HASH)

        assert record.status is TransferStatus.FAILED

    def test_decodes_usdt_transfer(self) -> None:
        calldata = (
            "0xa9059cbb"
            + RECEIVER[2:].rjust(64, "0")
            + format(25_500_000, "064x")
        )
        tx = _tx(to=USDT_CONTRACT, value="0x0", input=calldata)
        results = {"eth_getTransactionByHash": tx, "eth_getTransactionReceipt": None}
        with patch(POST_JSON, side_effect=_rpc(results)):
            record = self._source(usdt_contract=USDT_CONTRACT.upper().replace("0X", "0x")).lookup(TX_HASH)

        assert record.currency == "USDT"
        assert record.to_address == RECEIVER
        assert record.amount == Decimal("25.5")

    def test_amount_is_a_json_number_on_the_wire(self) -> None:
        results = {"eth_getTransactionByHash": _tx(), "eth_getTransactionReceipt": None}
        with patch(POST_JSON, side_effect=_rpc(results)):
            record = self._source().lookup(TX_HASH)

        body = TransactionOut(transaction=record).model_dump(mode="json", by_alias=True)
        assert body["transaction"]["amount"] == 1.0
        assert isinstance(body["transaction"]["amount"], float)
        assert TransferRecord.model_validate(body["transaction"]).amount == Decimal(1)

    def test_node_unreachable(self) -> None:
        with patch(POST_JSON, side_effect=HttpError("connection refused")):
            with pytest.raises(ChainUnavailable):
                self._source().lookup(TX_HASH)

    def test_node_error_response(self) -> None:
        error = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "boom"}}
        with patch(POST_JSON, return_value=error):
            with pytest.raises(ChainUnavailable):
                self._source().lookup(TX_HASH)


def test_factory(settings) -> None:
    assert isinstance(make_chain_status_source(settings), SimulatedChainStatusSource)

    rpc_settings = settings.model_copy(
        update={"chain_status_provider": "rpc", "chain_rpc_url": "http://node.test"}
    )
    source = make_chain_status_source(rpc_settings)
    assert isinstance(source, JsonRpcChainStatusSource)

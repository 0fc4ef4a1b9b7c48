"""Shared test fixtures."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from swiftchain.core.config import Settings
from swiftchain.main import create_app
from swiftchain.models.constants import TransferStatus
from swiftchain.models.transfer import TransferRecord

TX_HASH = "0x" + "ab" * 32
SENDER = "0x" + "1" * 40
RECEIVER = "0x" + "2" * 40


@pytest.fixture()
def settings(tmp_path) -> Settings:
    """Offline settings: static prices, simulated chain, throwaway data dir."""
    s = Settings(
        data_dir=tmp_path,
        debug=False,
        price_provider="static",
        chain_status_provider="simulated",
    )
    s.init_post_load()
    return s


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


def make_record(
    tx_hash: str = TX_HASH,
    status: TransferStatus = TransferStatus.PENDING,
    confirmations: int = 0,
    **fields,
) -> TransferRecord:
    fields.setdefault("from_address", SENDER)
    fields.setdefault("to_address", RECEIVER)
    fields.setdefault("amount", Decimal("118.06"))
    fields.setdefault("currency", "USDT")
    return TransferRecord(hash=tx_hash, status=status, confirmations=confirmations, **fields)

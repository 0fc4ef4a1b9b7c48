"""Status poller: state machine, time budget and per-hash supersession."""

import asyncio

import pytest

from swiftchain.client.poller import StatusPoller, advance
from swiftchain.models.constants import TransferStatus
from swiftchain.models.transfer import TransferRecord

from .conftest import TX_HASH, make_record


def _observed(status: TransferStatus = TransferStatus.PENDING, confirmations: int = 0, **fields) -> TransferRecord:
    return TransferRecord(hash=TX_HASH, status=status, confirmations=confirmations, **fields)


class FakeStatusFeed:
    """Returns the queued observations in order, repeating the last one."""

    def __init__(self, *observations):
        self._observations = list(observations)
        self.calls = 0

    async def __call__(self, tx_hash: str) -> TransferRecord:
        item = self._observations[min(self.calls, len(self._observations) - 1)]
        self.calls += 1
        if isinstance(item, Exception):
            raise item
        return item


class TestAdvance:
    def test_confirms_at_threshold(self) -> None:
        record = advance(make_record(), _observed(confirmations=12), confirmation_threshold=12)
        assert record.status is TransferStatus.CONFIRMED
        assert record.confirmations == 12

    def test_stays_pending_below_threshold(self) -> None:
        record = advance(make_record(), _observed(confirmations=11, block_number=99))
        assert record.status is TransferStatus.PENDING
        assert record.confirmations == 11
        assert record.block_number == 99

    def test_observed_confirmed_status(self) -> None:
        record = advance(make_record(), _observed(TransferStatus.CONFIRMED, confirmations=1))
        assert record.status is TransferStatus.CONFIRMED

    def test_observed_failure(self) -> None:
        record = advance(make_record(), _observed(TransferStatus.FAILED))
        assert record.status is TransferStatus.FAILED

    def test_terminal_record_is_unchanged(self) -> None:
        confirmed = make_record(status=TransferStatus.CONFIRMED, confirmations=12)
        assert advance(confirmed, _observed(TransferStatus.FAILED)) is confirmed

    def test_keeps_submission_fields(self) -> None:
        original = make_record(gas_used="21000")
        record = advance(original, _observed(confirmations=2))
        assert record.id == original.id
        assert record.amount == original.amount
        assert record.to_address == original.to_address
        assert record.gas_used == "21000"

    def test_confirmations_never_decrease(self) -> None:
        record = advance(make_record(confirmations=5), _observed(confirmations=3))
        assert record.confirmations == 5


class TestStatusPoller:
    @pytest.mark.asyncio
    async def test_confirmation_reported_exactly_once(self) -> None:
        feed = FakeStatusFeed(
            _observed(confirmations=3),
            _observed(confirmations=8),
            _observed(confirmations=12),
            _observed(TransferStatus.CONFIRMED, confirmations=13),
        )
        updates = []
        poller = StatusPoller(feed, interval=0.01, budget=5)

        handle = poller.start(make_record(), on_update=updates.append)
        final = await handle.wait()

        assert final.status is TransferStatus.CONFIRMED
        assert final.confirmations == 12
        assert feed.calls == 3
        assert [u.status for u in updates if u.is_terminal] == [TransferStatus.CONFIRMED]
        assert [u.confirmations for u in updates] == [3, 8, 12]

    @pytest.mark.asyncio
    async def test_failure_is_terminal(self) -> None:
        feed = FakeStatusFeed(_observed(confirmations=1), _observed(TransferStatus.FAILED))
        poller = StatusPoller(feed, interval=0.01, budget=5)

        final = await poller.start(make_record()).wait()

        assert final.status is TransferStatus.FAILED
        assert feed.calls == 2

    @pytest.mark.asyncio
    async def test_budget_exhaustion_leaves_record_pending(self) -> None:
        feed = FakeStatusFeed(_observed(confirmations=1))
        poller = StatusPoller(feed, interval=0.01, budget=0.05)

        handle = poller.start(make_record())
        final = await handle.wait()

        assert final.status is TransferStatus.PENDING
        assert feed.calls >= 1
        assert handle.done
        assert not poller.is_polling(TX_HASH)

    @pytest.mark.asyncio
    async def test_poll_errors_are_retried(self) -> None:
        feed = FakeStatusFeed(
            RuntimeError("node hiccup"),
            _observed(TransferStatus.CONFIRMED, confirmations=12),
        )
        poller = StatusPoller(feed, interval=0.01, budget=5)

        final = await poller.start(make_record()).wait()

        assert final.status is TransferStatus.CONFIRMED
        assert feed.calls == 2

    @pytest.mark.asyncio
    async def test_failing_update_callback_keeps_polling(self) -> None:
        feed = FakeStatusFeed(
            _observed(confirmations=3),
            _observed(TransferStatus.CONFIRMED, confirmations=12),
        )
        delivered = []

        def on_update(record: TransferRecord) -> None:
            delivered.append(record)
            if len(delivered) == 1:
                raise OSError("history store is locked")

        poller = StatusPoller(feed, interval=0.01, budget=5)
        final = await poller.start(make_record(), on_update=on_update).wait()

        assert final.status is TransferStatus.CONFIRMED
        assert [u.confirmations for u in delivered] == [3, 12]
        assert delivered[-1].status is TransferStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_terminal_record_is_not_polled(self) -> None:
        feed = FakeStatusFeed(_observed())
        poller = StatusPoller(feed, interval=0.01, budget=5)

        final = await poller.start(make_record(status=TransferStatus.FAILED)).wait()

        assert final.status is TransferStatus.FAILED
        assert feed.calls == 0

    @pytest.mark.asyncio
    async def test_restart_supersedes_running_loop(self) -> None:
        feed = FakeStatusFeed(_observed(confirmations=1))
        poller = StatusPoller(feed, interval=0.01, budget=30)

        first = poller.start(make_record())
        second = poller.start(make_record())
        await first.wait()

        assert first.done
        assert not second.done
        assert poller.is_polling(TX_HASH.upper().replace("0X", "0x"))

        assert poller.cancel(TX_HASH) is True
        await second.wait()
        assert second.done
        assert not poller.is_polling(TX_HASH)

    @pytest.mark.asyncio
    async def test_cancel_all(self) -> None:
        feed = FakeStatusFeed(_observed())
        poller = StatusPoller(feed, interval=0.01, budget=30)
        handles = [
            poller.start(make_record("0x" + format(n, "064x"))) for n in range(3)
        ]

        poller.cancel_all()
        for handle in handles:
            await handle.wait()

        assert all(h.done for h in handles)
        assert all(h.record.status is TransferStatus.PENDING for h in handles)

    @pytest.mark.asyncio
    async def test_cancel_unknown_hash(self) -> None:
        poller = StatusPoller(FakeStatusFeed(_observed()))
        assert poller.cancel(TX_HASH) is False
        await asyncio.sleep(0)

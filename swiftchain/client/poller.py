"""Transaction status polling.

One asyncio task per transaction hash polls the backend at a fixed interval
until the record becomes terminal or the time budget runs out. Running out of
time leaves the record pending (it can be refreshed later); it is never
treated as a failure.

State machine (driven by `advance`):
    pending -> confirmed   observed status confirmed, or confirmations >= threshold
    pending -> failed      observed status failed
    confirmed / failed     terminal, further observations are ignored
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from swiftchain.models.constants import TransferStatus
from swiftchain.models.transfer import TransferRecord

logger = logging.getLogger("swiftchain.client.poller")

StatusFetcher = Callable[[str], Awaitable[TransferRecord]]
UpdateCallback = Callable[[TransferRecord], None]

# Observation fields copied onto the tracked record when present
_OBSERVED_FIELDS = ("block_number", "gas_used", "gas_price")


def advance(
    record: TransferRecord, observed: TransferRecord, confirmation_threshold: int = 12
) -> TransferRecord:
    """Apply one observation to ``record`` and return the resulting record."""
    if record.is_terminal:
        return record
    update = {
        name: getattr(observed, name)
        for name in _OBSERVED_FIELDS
        if getattr(observed, name) is not None
    }
    update["confirmations"] = max(record.confirmations, observed.confirmations)
    if observed.status is TransferStatus.FAILED:
        update["status"] = TransferStatus.FAILED
    elif (
        observed.status is TransferStatus.CONFIRMED
        or update["confirmations"] >= confirmation_threshold
    ):
        update["status"] = TransferStatus.CONFIRMED
    return record.model_copy(update=update)


class PollHandle:
    """Handle for one running poll loop."""

    def __init__(self, tx_hash: str, record: TransferRecord):
        self.tx_hash = tx_hash
        self.record = record
        self._task: Optional[asyncio.Task] = None

    def _attach(self, task: asyncio.Task) -> None:
        self._task = task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    @property
    def done(self) -> bool:
        return self._task is None or self._task.done()

    async def wait(self) -> TransferRecord:
        """Wait for the loop to stop; returns the last known record."""
        if self._task is not None:
            try:
                await asyncio.shield(self._task)
            except asyncio.CancelledError:
                if not self._task.cancelled():
                    raise
        return self.record


class StatusPoller:
    def __init__(
        self,
        fetch_status: StatusFetcher,
        *,
        interval: float = 3.0,
        budget: float = 120.0,
        confirmation_threshold: int = 12,
    ):
        self._fetch = fetch_status
        self.interval = interval
        self.budget = budget
        self.confirmation_threshold = confirmation_threshold
        self._active: Dict[str, PollHandle] = {}

    def start(
        self,
        record: TransferRecord,
        on_update: Optional[UpdateCallback] = None,
    ) -> PollHandle:
        """Start polling ``record.hash``, superseding any loop already running for it.

        ``on_update`` is called with every changed record; the transition into
        a terminal status is therefore reported exactly once.
        """
        key = record.hash.lower()
        previous = self._active.get(key)
        if previous is not None:
            logger.debug("superseding poll loop for %s", key)
            previous.cancel()
        handle = PollHandle(record.hash, record)
        self._active[key] = handle
        task = asyncio.get_running_loop().create_task(self._run(handle, on_update))
        handle._attach(task)
        task.add_done_callback(lambda _t: self._release(key, handle))
        return handle

    def is_polling(self, tx_hash: str) -> bool:
        handle = self._active.get(tx_hash.lower())
        return handle is not None and not handle.done

    def cancel(self, tx_hash: str) -> bool:
        handle = self._active.get(tx_hash.lower())
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> None:
        for handle in list(self._active.values()):
            handle.cancel()

    def _release(self, key: str, handle: PollHandle) -> None:
        if self._active.get(key) is handle:
            del self._active[key]

    async def _run(self, handle: PollHandle, on_update: Optional[UpdateCallback]) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.budget
        while not handle.record.is_terminal:
            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.info(
                    "poll budget exhausted for %s; still pending",
                    handle.tx_hash,
                    extra={"tx_hash": handle.tx_hash},
                )
                return
            await asyncio.sleep(min(self.interval, remaining))
            try:
                observed = await self._fetch(handle.tx_hash)
            except Exception as e:
                logger.warning(
                    "status poll for %s failed: %s", handle.tx_hash, e, extra={"tx_hash": handle.tx_hash}
                )
                continue
            updated = advance(handle.record, observed, self.confirmation_threshold)
            if updated != handle.record:
                handle.record = updated
                if on_update is not None:
                    try:
                        on_update(updated)
                    except Exception:
                        logger.exception(
                            "update callback for %s failed", handle.tx_hash, extra={"tx_hash": handle.tx_hash}
                        )
        logger.info(
            "transaction %s is %s",
            handle.tx_hash,
            handle.record.status.value,
            extra={"tx_hash": handle.tx_hash},
        )

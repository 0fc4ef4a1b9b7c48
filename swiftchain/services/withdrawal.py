"""Simulated INR bank withdrawal.

No money moves: the request is validated (see `BankDetails`) and acknowledged
with a reference id and an estimated completion time.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

from swiftchain.models.withdrawal import WithdrawalAck, WithdrawalIn

logger = logging.getLogger("swiftchain.withdrawal")

SETTLEMENT_DELAY = timedelta(hours=24)


def simulate_withdrawal(request: WithdrawalIn) -> WithdrawalAck:
    withdrawal_id = f"WD-{uuid.uuid4().hex[:12].upper()}"
    masked = "****" + request.bank_details.account_number[-4:]
    logger.info(
        "simulated withdrawal %s of %s to %s (%s)",
        withdrawal_id,
        request.amount,
        masked,
        request.bank_details.ifsc_code,
    )
    return WithdrawalAck(
        withdrawal_id=withdrawal_id,
        amount=request.amount,
        estimated_completion=datetime.now(timezone.utc) + SETTLEMENT_DELAY,
        message=f"Withdrawal request submitted to account {masked}",
    )

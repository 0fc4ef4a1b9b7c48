"""Four-step transfer orchestration.

    ENTRY    amount, receiver address, currency -> conversion fetched
    REVIEW   conversion accepted by the user
    CONFIRM  wallet checks + send -> pending TransferRecord (saved to history)
    STATUS   record tracked by the status poller until terminal

State lives in an explicit, immutable `TransferContext` returned by each
step and passed into the next. Submitting again always builds a fresh
context, so an earlier conversion can never leak into a new transfer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import IntEnum
from typing import Any, Optional

from swiftchain.core.errors import InvalidAddress, InvalidAmount, MissingContext, TransferNotConfirmed
from swiftchain.models.constants import ADDRESS_RE, MIN_AMOUNT_INR, TransferStatus
from swiftchain.models.conversion import ConversionResult
from swiftchain.models.transfer import TransferRecord
from swiftchain.models.withdrawal import BankDetails, WithdrawalAck
from swiftchain.services.money import to_decimal

from .api import SwiftChainAPI
from .history import TransactionHistoryStore
from .poller import PollHandle, StatusPoller, advance
from .wallet import WalletBridge, ensure_can_send

logger = logging.getLogger("swiftchain.client.flow")


class FlowStep(IntEnum):
    ENTRY = 1
    REVIEW = 2
    CONFIRM = 3
    STATUS = 4


@dataclass(frozen=True)
class TransferDraft:
    amount: Decimal
    receiver_address: str
    currency: str


@dataclass(frozen=True)
class TransferContext:
    draft: Optional[TransferDraft] = None
    conversion: Optional[ConversionResult] = None
    reviewed: bool = False
    record: Optional[TransferRecord] = None

    @property
    def step(self) -> FlowStep:
        if self.record is not None:
            return FlowStep.STATUS
        if self.reviewed:
            return FlowStep.CONFIRM
        if self.conversion is not None:
            return FlowStep.REVIEW
        return FlowStep.ENTRY


def validate_entry(amount: Any, receiver_address: str, currency: str) -> TransferDraft:
    value = to_decimal(amount)
    if value < Decimal(MIN_AMOUNT_INR):
        raise InvalidAmount()
    address = (receiver_address or "").strip()
    if not address:
        raise InvalidAddress("Please enter receiver wallet address.")
    if not ADDRESS_RE.match(address):
        raise InvalidAddress()
    return TransferDraft(amount=value, receiver_address=address, currency=(currency or "").upper())


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise MissingContext(message, redirect_step=FlowStep.ENTRY)


class TransferFlow:
    def __init__(
        self,
        api: SwiftChainAPI,
        wallet: WalletBridge,
        history: TransactionHistoryStore,
        poller: StatusPoller,
        chain_id: int = 11155111,
    ):
        self._api = api
        self._wallet = wallet
        self._history = history
        self._poller = poller
        self._chain_id = chain_id

    # Step 1 -------------------------------------------------------
    async def submit(self, amount: Any, receiver_address: str, currency: str = "USDT") -> TransferContext:
        draft = validate_entry(amount, receiver_address, currency)
        conversion = await self._api.convert(draft.amount, draft.currency)
        logger.info(
            "converted %s INR -> %s %s", draft.amount, conversion.converted_amount, draft.currency
        )
        return TransferContext(draft=draft, conversion=conversion)

    # Step 2 -------------------------------------------------------
    def review(self, ctx: TransferContext) -> TransferContext:
        _require(
            ctx.draft is not None and ctx.conversion is not None,
            "No transfer data found. Please start over.",
        )
        return replace(ctx, reviewed=True)

    def back(self, ctx: TransferContext, to_step: FlowStep) -> TransferContext:
        """Return to ``to_step``, dropping every later step's state.

        Leaving the status step stops any poll loop tracking the record.
        """
        if to_step < FlowStep.STATUS:
            self.stop_tracking(ctx)
        if to_step <= FlowStep.ENTRY:
            # Keep the draft so the form can be prefilled; the conversion goes.
            return TransferContext(draft=ctx.draft)
        if to_step == FlowStep.REVIEW:
            return TransferContext(draft=ctx.draft, conversion=ctx.conversion)
        if to_step == FlowStep.CONFIRM:
            return replace(ctx, record=None)
        return ctx

    # Step 3 -------------------------------------------------------
    async def connect_wallet(self) -> str:
        account = await self._wallet.connect()
        await self._wallet.switch_network(self._chain_id)
        return account

    async def send(self, ctx: TransferContext) -> TransferContext:
        _require(
            ctx.draft is not None and ctx.conversion is not None and ctx.reviewed,
            "Transfer has not been reviewed. Please start over.",
        )
        draft, conversion = ctx.draft, ctx.conversion
        amount = conversion.converted_amount
        if amount <= 0:
            raise InvalidAmount("Amount does not cover the fees.")

        status = self._wallet.get_status()
        balance = Decimal(0)
        if status.is_connected and status.account and status.is_correct_network:
            balance = await self._wallet.get_balance(status.account, draft.currency)
        ensure_can_send(status, balance, amount, draft.currency)

        # TransactionRejected propagates untouched; ctx stays on CONFIRM.
        result = await self._wallet.send_transaction(draft.receiver_address, amount, draft.currency)
        record = TransferRecord(
            hash=result.hash,
            from_address=status.account,
            to_address=draft.receiver_address,
            amount=amount,
            currency=draft.currency,
            status=TransferStatus.PENDING,
            gas_used=result.gas_used,
            gas_price=result.gas_price,
            confirmations=result.confirmations,
            block_number=result.block_number,
        )
        record = self._history.save(record)
        logger.info(
            "submitted %s %s as %s",
            amount,
            draft.currency,
            record.hash,
            extra={"tx_hash": record.hash, "currency": draft.currency},
        )
        return replace(ctx, record=record)

    # Step 4 -------------------------------------------------------
    def track(self, ctx: TransferContext) -> PollHandle:
        _require(ctx.record is not None, "No transaction data found.")
        return self._poller.start(ctx.record, on_update=self._history.save)

    def stop_tracking(self, ctx: TransferContext) -> bool:
        if ctx.record is None:
            return False
        return self._poller.cancel(ctx.record.hash)

    async def refresh(self, ctx: TransferContext) -> TransferContext:
        """One manual status check for a record left pending after polling stopped."""
        _require(ctx.record is not None, "No transaction data found.")
        observed = await self._api.get_transaction_status(ctx.record.hash)
        record = advance(ctx.record, observed, self._poller.confirmation_threshold)
        if record != ctx.record:
            record = self._history.save(record)
        return replace(ctx, record=record)

    async def withdraw(self, ctx: TransferContext, bank_details: BankDetails) -> WithdrawalAck:
        _require(ctx.record is not None, "No transaction data found.")
        if ctx.record.status is not TransferStatus.CONFIRMED:
            raise TransferNotConfirmed()
        return await self._api.simulate_withdrawal(ctx.record.amount, bank_details)

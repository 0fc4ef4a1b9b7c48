"""Client-side core: API client, wallet bridge, status poller, transfer flow and history."""

from .api import ApiError, SwiftChainAPI
from .flow import FlowStep, TransferContext, TransferDraft, TransferFlow
from .history import TransactionHistoryStore, export_csv
from .poller import PollHandle, StatusPoller, advance
from .wallet import ConnectionStatus, SendResult, WalletBridge, ensure_can_send

__all__ = [
    "ApiError",
    "SwiftChainAPI",
    "FlowStep",
    "TransferContext",
    "TransferDraft",
    "TransferFlow",
    "TransactionHistoryStore",
    "export_csv",
    "PollHandle",
    "StatusPoller",
    "advance",
    "ConnectionStatus",
    "SendResult",
    "WalletBridge",
    "ensure_can_send",
]

"""Domain error kinds and the FastAPI handlers that render them.

Every error carries a stable ``code`` used both in HTTP error bodies
(``{"error": code, "detail": message}``) and by the client API to rebuild the
same exception type on the other side of the wire.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Type

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("swiftchain.errors")


class SwiftChainError(Exception):
    code = "swiftchain_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidAmount(SwiftChainError):
    code = "invalid_amount"
    default_message = "Please enter a valid amount (minimum ₹0.01)."


class InvalidAddress(SwiftChainError):
    code = "invalid_address"
    default_message = "Please enter a valid Ethereum wallet address."


class UnsupportedCurrency(SwiftChainError):
    code = "unsupported_currency"
    default_message = "Unsupported currency."


class RateUnavailable(SwiftChainError):
    code = "rate_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Exchange rate is currently unavailable."


class InsufficientBalance(SwiftChainError):
    code = "insufficient_balance"
    default_message = "Insufficient wallet balance."


class WalletNotConnected(SwiftChainError):
    code = "wallet_not_connected"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Please connect your wallet first."


class WrongNetwork(SwiftChainError):
    code = "wrong_network"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Please switch to the Sepolia network."


class TransactionRejected(SwiftChainError):
    code = "transaction_rejected"
    default_message = "Transaction was rejected."


class MissingContext(SwiftChainError):
    code = "missing_context"
    status_code = status.HTTP_409_CONFLICT
    default_message = "No transfer data found. Please start over."

    def __init__(self, message: Optional[str] = None, redirect_step: int = 1):
        super().__init__(message)
        self.redirect_step = redirect_step


class ChainUnavailable(SwiftChainError):
    code = "chain_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Blockchain node is unreachable, please retry."


class InvalidTransactionHash(SwiftChainError):
    code = "invalid_transaction_hash"
    default_message = "Transaction hash must be 0x followed by 64 hex characters."


class TransactionNotFound(SwiftChainError):
    code = "transaction_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Transaction not found."


class TransferNotConfirmed(SwiftChainError):
    code = "transfer_not_confirmed"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Only confirmed transfers can be withdrawn."


_ERRORS_BY_CODE: Dict[str, Type[SwiftChainError]] = {
    cls.code: cls
    for cls in (
        InvalidAmount,
        InvalidAddress,
        UnsupportedCurrency,
        RateUnavailable,
        InsufficientBalance,
        WalletNotConnected,
        WrongNetwork,
        TransactionRejected,
        MissingContext,
        InvalidTransactionHash,
        ChainUnavailable,
        TransactionNotFound,
        TransferNotConfirmed,
    )
}


def error_from_code(code: Optional[str], message: Optional[str] = None) -> SwiftChainError:
    """Rebuild a domain error from its wire code (unknown codes -> base class)."""
    cls = _ERRORS_BY_CODE.get(code or "", SwiftChainError)
    return cls(message)


# Handlers ---------------------------------------------------------


def swiftchain_error_handler(request: Request, exc: SwiftChainError):  # type: ignore
    logger.info("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.message},
    )


def http_error_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "error": "not_found",
                "detail": f"No route for {request.method} {request.url.path}",
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "http_error", "detail": exc.detail},
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )

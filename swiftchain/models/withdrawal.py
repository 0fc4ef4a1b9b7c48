from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from .base import Money, WireModel
from .constants import ACCOUNT_NUMBER_RE, IFSC_RE


class BankDetails(WireModel):
    account_number: str
    ifsc_code: str
    account_holder: str = Field(..., min_length=1)

    @field_validator("account_number")
    @classmethod
    def valid_account_number(cls, v: str) -> str:
        v = v.strip()
        if not ACCOUNT_NUMBER_RE.match(v):
            raise ValueError("account number must be 9-18 digits")
        return v

    @field_validator("ifsc_code")
    @classmethod
    def valid_ifsc(cls, v: str) -> str:
        v = v.strip().upper()
        if not IFSC_RE.match(v):
            raise ValueError("invalid IFSC code")
        return v

    @field_validator("account_holder")
    @classmethod
    def holder_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("account holder is required")
        return v.strip()


class WithdrawalIn(WireModel):
    amount: Money = Field(..., gt=0)
    bank_details: BankDetails


class WithdrawalAck(WireModel):
    success: bool = True
    withdrawal_id: str
    status: str = "processing"
    amount: Money
    estimated_completion: datetime
    message: str

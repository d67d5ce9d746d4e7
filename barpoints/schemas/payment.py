from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, ConfigDict


class BalanceOut(BaseModel):
    total_earnings: Decimal
    available_balance: Decimal
    withdrawn_amount: Decimal
    points: int

    min_withdraw_amount: Decimal
    max_withdraw_amount: Decimal
    commission_rate: Decimal


class WithdrawIn(BaseModel):
    """
    Сумма принимается как есть (число или строка):
    разбор и коды ошибок (amount_invalid, ...) - в сервисе, по порядку проверок.
    """
    model_config = ConfigDict(extra="forbid")

    amount: Union[int, float, str, None] = None
    phone: Optional[str] = Field(default=None, max_length=32)
    bank_name: Optional[str] = Field(default=None, max_length=120)


class WithdrawalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    external_id: str

    amount: Decimal
    commission: Decimal
    amount_to_receive: Decimal

    phone: str
    bank_name: Optional[str] = None
    method: str

    status: str
    failure_reason: Optional[str] = None
    processed_at: Optional[datetime] = None
    created_at: datetime


class WithdrawalListOut(BaseModel):
    items: List[WithdrawalOut]
    limit: int
    offset: int


class WithdrawalStatusIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Literal["completed", "failed", "cancelled"]
    reason: Optional[str] = Field(default=None, max_length=255)

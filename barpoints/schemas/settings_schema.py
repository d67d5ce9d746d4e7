# barpoints/schemas/settings_schema.py
from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict, model_validator


class SettingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int = 1
    withdraw_min_amount: Decimal = Decimal("100")
    withdraw_max_amount: Decimal = Decimal("50000")
    commission_rate: Decimal = Decimal("0.02")
    order_delivery_days: int = 7
    lottery_ticket_points: int = 100
    lottery_min_points: int = 100


class SettingsUpdate(BaseModel):
    """Частичное обновление: None = не трогать."""
    model_config = ConfigDict(extra="forbid")

    withdraw_min_amount: Optional[Decimal] = Field(default=None, gt=0)
    withdraw_max_amount: Optional[Decimal] = Field(default=None, gt=0)
    commission_rate: Optional[Decimal] = Field(default=None, ge=0, lt=1)
    order_delivery_days: Optional[int] = Field(default=None, ge=0, le=365)
    lottery_ticket_points: Optional[int] = Field(default=None, ge=1)
    lottery_min_points: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_limits(self):
        lo, hi = self.withdraw_min_amount, self.withdraw_max_amount
        if lo is not None and hi is not None and lo > hi:
            raise ValueError("withdraw_min_amount не может быть больше withdraw_max_amount")
        return self

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ConfigDict


OrderStatusName = Literal["pending", "confirmed", "processing", "shipped", "delivered", "cancelled"]


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    prize_id: Optional[int] = None
    prize_name: str
    prize_description: Optional[str] = None
    price_at_time: int
    quantity: int


class OrderStatusEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: str
    comment: Optional[str] = None
    created_at: datetime


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str
    total_cost: int
    status: str
    payment_method: str

    delivery_address: Optional[str] = None
    notes: Optional[str] = None

    estimated_delivery: Optional[datetime] = None
    actual_delivery: Optional[datetime] = None
    created_at: datetime

    items: List[OrderItemOut] = []
    history: List[OrderStatusEntryOut] = []

    can_be_cancelled: bool = False


class OrderListOut(BaseModel):
    items: List[OrderOut]
    total: int
    limit: int
    offset: int


class OrderUpdateIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    delivery_address: Optional[str] = Field(default=None, max_length=1000)
    notes: Optional[str] = Field(default=None, max_length=1000)


class OrderCancelIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reason: Optional[str] = Field(default=None, max_length=500)


class OrderStatusIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: OrderStatusName
    comment: Optional[str] = Field(default=None, max_length=500)

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict


class CartItemIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    quantity: int = 1


class CartItemOut(BaseModel):
    prize_id: int
    name: str
    cost: int
    quantity: int
    line_total: int
    is_available: bool


class CartOut(BaseModel):
    items: List[CartItemOut]
    total_cost: int
    total_items: int


class CheckoutIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    delivery_address: Optional[str] = Field(default=None, max_length=1000)
    notes: Optional[str] = Field(default=None, max_length=1000)

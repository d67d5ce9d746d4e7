from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ConfigDict


ProofType = Literal["receipt", "photo"]


class SaleCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    product_id: int
    # проверка >= 1 в калькуляторе, чтобы ответ был 400 с кодом, а не 422
    quantity: int
    proof_type: ProofType = "receipt"
    proof_file: Optional[str] = Field(default=None, max_length=500, description="Ссылка на загруженный файл")


class QuoteOut(BaseModel):
    product_id: int
    quantity: int
    price_per_portion: Decimal
    total_price: Decimal
    points: int


class SaleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    product_name: Optional[str] = None

    quantity: int
    price: Decimal
    points: int

    proof_type: str
    proof_file: Optional[str] = None

    created_at: datetime


class SaleListOut(BaseModel):
    items: List[SaleOut]
    total: int
    limit: int
    offset: int

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, ConfigDict

from barpoints.schemas.user import RefOut


class NamedIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=120)


class NamedOut(BaseModel):
    """Бренд, категория или город: только id и имя."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class BarIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    city_id: int
    name: str = Field(..., min_length=1, max_length=200)
    address: Optional[str] = Field(default=None, max_length=255)


class BarOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: Optional[str] = None
    city: RefOut


class ProductPublicOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    brand: RefOut
    category: RefOut

    bottle_price: Decimal
    portions_per_bottle: Decimal

    points_mode: str
    points_per_portion: int
    points_per_ruble: Decimal

    description: Optional[str] = None

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, ConfigDict


PrizeCategory = Literal["merchandise", "discount", "experience", "cash", "other"]
PointsModeName = Literal["per_portion", "per_ruble"]


class PrizeCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    cost: int = Field(..., ge=0, description="Стоимость в баллах")
    category: PrizeCategory = "other"
    quantity: int = Field(default=0, ge=0)
    image_url: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = True


class PrizeUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    cost: Optional[int] = Field(default=None, ge=0)
    category: Optional[PrizeCategory] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None


class PrizeAdminOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    cost: int
    category: str
    quantity: int
    image_url: Optional[str] = None
    is_active: bool
    created_at: datetime


class ProductCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=200)
    brand_id: int
    category_id: int

    bottle_price: Decimal = Field(..., ge=0)
    portions_per_bottle: Decimal = Field(default=Decimal("12"), gt=0)

    points_mode: PointsModeName = "per_ruble"
    points_per_portion: int = Field(default=0, ge=0)
    points_per_ruble: Decimal = Field(default=Decimal("0"), ge=0)

    description: Optional[str] = None
    is_active: bool = True


class ProductUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    brand_id: Optional[int] = None
    category_id: Optional[int] = None

    bottle_price: Optional[Decimal] = Field(default=None, ge=0)
    portions_per_bottle: Optional[Decimal] = Field(default=None, gt=0)

    points_mode: Optional[PointsModeName] = None
    points_per_portion: Optional[int] = Field(default=None, ge=0)
    points_per_ruble: Optional[Decimal] = Field(default=None, ge=0)

    description: Optional[str] = None
    is_active: Optional[bool] = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    brand_id: int
    category_id: int

    bottle_price: Decimal
    portions_per_bottle: Decimal

    points_mode: str
    points_per_portion: int
    points_per_ruble: Decimal

    description: Optional[str] = None
    is_active: bool


class LedgerAdjustIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: int
    type: Literal["bonus", "penalty"]
    amount: int = Field(..., gt=0)
    description: str = Field(default="", max_length=255)

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class RefOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class UserOut(BaseModel):
    """Город и бар уже развёрнуты в {id, name} (см. services.users.user_view)."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: str

    city: Optional[RefOut] = None
    bar: Optional[RefOut] = None

    points: int
    earnings_balance: Decimal
    total_earnings: Decimal

    is_active: bool
    created_at: datetime

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, Text, ForeignKey
from sqlalchemy.orm import relationship

from barpoints.core.database import Base


class PointsMode(str, enum.Enum):
    PER_PORTION = "per_portion"
    PER_RUBLE = "per_ruble"


class Brand(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False, unique=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False, unique=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)

    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)

    # цена бутылки и число порций в ней -> цена порции
    bottle_price = Column(Numeric(12, 2), nullable=False)
    portions_per_bottle = Column(Numeric(8, 2), default=Decimal("12"), nullable=False)

    points_mode = Column(String(20), default=PointsMode.PER_RUBLE.value, nullable=False)
    points_per_portion = Column(Integer, default=0, nullable=False)
    points_per_ruble = Column(Numeric(10, 4), default=Decimal("0"), nullable=False)

    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    brand = relationship("Brand")
    category = relationship("Category")


class Prize(Base):
    __tablename__ = "prizes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")

    cost = Column(Integer, nullable=False)  # в баллах
    category = Column(String(32), default="other", nullable=False)  # merchandise | discount | experience | cash | other

    quantity = Column(Integer, default=0, nullable=False)  # остаток на складе
    image_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    @property
    def is_available(self) -> bool:
        return bool(self.is_active) and int(self.quantity or 0) > 0

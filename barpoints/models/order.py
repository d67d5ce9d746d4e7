from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from barpoints.core.database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(40), unique=True, nullable=False, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    total_cost = Column(Integer, nullable=False)
    status = Column(String(16), nullable=False, default=OrderStatus.PENDING.value, index=True)
    payment_method = Column(String(16), nullable=False, default="points")

    delivery_address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    estimated_delivery = Column(DateTime, nullable=True)
    actual_delivery = Column(DateTime, nullable=True)

    version = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.id",
        cascade="all, delete-orphan",
    )
    history = relationship(
        "OrderStatusEntry",
        back_populates="order",
        order_by="OrderStatusEntry.id",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}


class OrderItem(Base):
    """Снимок приза на момент заказа - правки приза историю не меняют."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)

    prize_id = Column(Integer, ForeignKey("prizes.id"), nullable=True)
    prize_name = Column(String(200), nullable=False)
    prize_description = Column(Text, nullable=True)
    price_at_time = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")


class OrderStatusEntry(Base):
    __tablename__ = "order_status_history"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)

    status = Column(String(16), nullable=False)
    comment = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    order = relationship("Order", back_populates="history")

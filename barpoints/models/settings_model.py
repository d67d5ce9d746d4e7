from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, Integer, DateTime, Numeric

from barpoints.core.database import Base


class ProgramSettings(Base):
    __tablename__ = "program_settings"

    id = Column(Integer, primary_key=True)

    # --- Вывод средств ---
    withdraw_min_amount = Column(Numeric(12, 2), default=Decimal("100"), nullable=False)
    withdraw_max_amount = Column(Numeric(12, 2), default=Decimal("50000"), nullable=False)
    commission_rate = Column(Numeric(6, 4), default=Decimal("0.02"), nullable=False)  # 0.02 = 2%

    # --- Заказы ---
    order_delivery_days = Column(Integer, default=7, nullable=False)

    # --- Лотерея ---
    lottery_ticket_points = Column(Integer, default=100, nullable=False)
    lottery_min_points = Column(Integer, default=100, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

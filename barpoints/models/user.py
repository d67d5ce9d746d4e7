from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from barpoints.core.database import Base


class Role(str, enum.Enum):
    ADMIN = "admin"
    BRAND_REPRESENTATIVE = "brand_representative"
    BAR_MANAGER = "bar_manager"
    BARTENDER = "bartender"
    TEST_BARTENDER = "test_bartender"


# участвуют в рейтинге и лотерее
BARTENDER_ROLES = (Role.BARTENDER.value, Role.TEST_BARTENDER.value)


def normalize_role(raw) -> Role:
    """
    Роль приходит то строкой ("admin"), то объектом ({"name": "admin"}).
    Приводим к Role один раз - дальше по коду только enum.
    """
    if isinstance(raw, Role):
        return raw
    if isinstance(raw, dict):
        raw = raw.get("name")
    elif raw is not None and not isinstance(raw, str):
        raw = getattr(raw, "name", None)
    value = str(raw or "").strip().lower()
    try:
        return Role(value)
    except ValueError:
        return Role.BARTENDER


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(32), nullable=True)

    role = Column(String(32), default=Role.BARTENDER.value, nullable=False, index=True)

    city_id = Column(Integer, ForeignKey("cities.id"), nullable=True, index=True)
    bar_id = Column(Integer, ForeignKey("bars.id"), nullable=True, index=True)

    # кэш суммы леджера, пересчитывается при каждой записи
    points = Column(Integer, default=0, nullable=False)

    # деньги (₽): доступно к выводу / заработано за всё время
    earnings_balance = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    total_earnings = Column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)

    # optimistic lock: параллельная запись по тому же пользователю -> StaleDataError
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    city = relationship("City")
    bar = relationship("Bar")
    ledger_entries = relationship("LedgerEntry", back_populates="user")
    sales = relationship("Sale", back_populates="user")

    __mapper_args__ = {"version_id_col": version}

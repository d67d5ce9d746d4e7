from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from barpoints.core.database import Base


class WithdrawalStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class WithdrawalRequest(Base):
    __tablename__ = "withdrawal_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    amount = Column(Numeric(12, 2), nullable=False)
    commission = Column(Numeric(12, 2), nullable=False)
    amount_to_receive = Column(Numeric(12, 2), nullable=False)

    phone = Column(String(16), nullable=False)
    bank_name = Column(String(120), nullable=True)
    method = Column(String(16), nullable=False, default="sbp")

    status = Column(String(16), nullable=False, default=WithdrawalStatus.PENDING.value, index=True)
    external_id = Column(String(64), unique=True, nullable=False)
    failure_reason = Column(String(255), nullable=True)
    processed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User")

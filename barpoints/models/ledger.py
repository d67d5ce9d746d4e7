from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from barpoints.core.database import Base


class LedgerType(str, enum.Enum):
    EARNED = "earned"
    SPENT = "spent"
    BONUS = "bonus"
    PENALTY = "penalty"
    REFUND = "refund"


DEBIT_TYPES = (LedgerType.SPENT.value, LedgerType.PENALTY.value)


class LedgerEntry(Base):
    """
    Движение баллов. Только append - записи не меняются и не удаляются.
    amount всегда > 0, знак определяется типом.
    """
    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    type = Column(String(16), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    description = Column(String(255), nullable=False, default="")

    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    user = relationship("User", back_populates="ledger_entries")

    @property
    def signed_amount(self) -> int:
        if self.type in DEBIT_TYPES:
            return -int(self.amount)
        return int(self.amount)

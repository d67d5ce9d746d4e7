from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from barpoints.core.database import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False)  # порций продано
    price = Column(Numeric(12, 2), nullable=False)
    points = Column(Integer, nullable=False, default=0)

    proof_type = Column(String(16), nullable=False, default="receipt")  # receipt | photo
    proof_file = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    user = relationship("User", back_populates="sales")
    product = relationship("Product")

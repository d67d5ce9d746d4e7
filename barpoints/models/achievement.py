from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint

from barpoints.core.database import Base


class AchievementUnlock(Base):
    """Кэш момента разблокировки. Сам факт считается на лету из продаж/леджера."""
    __tablename__ = "achievement_unlocks"
    __table_args__ = (UniqueConstraint("user_id", "code", name="uq_achievement_user_code"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    code = Column(String(40), nullable=False)
    unlocked_at = Column(DateTime, default=datetime.utcnow, nullable=False)

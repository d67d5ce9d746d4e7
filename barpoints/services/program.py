from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from barpoints.core.config import settings as env_settings
from barpoints.models.settings_model import ProgramSettings


def get_program_settings(db: Session) -> ProgramSettings:
    s = db.scalar(select(ProgramSettings).order_by(ProgramSettings.id.asc()).limit(1))
    if s:
        return s
    s = ProgramSettings(
        withdraw_min_amount=env_settings.WITHDRAW_MIN_AMOUNT,
        withdraw_max_amount=env_settings.WITHDRAW_MAX_AMOUNT,
        commission_rate=env_settings.WITHDRAW_COMMISSION_RATE,
        order_delivery_days=int(env_settings.ORDER_DELIVERY_DAYS),
        lottery_ticket_points=int(env_settings.LOTTERY_TICKET_POINTS),
        lottery_min_points=int(env_settings.LOTTERY_MIN_POINTS),
    )
    db.add(s)
    db.commit()
    db.refresh(s)
    return s


def update_program_settings(db: Session, **fields) -> ProgramSettings:
    s = get_program_settings(db)
    for key, value in fields.items():
        if value is not None and hasattr(s, key):
            setattr(s, key, value)
    db.commit()
    db.refresh(s)
    return s

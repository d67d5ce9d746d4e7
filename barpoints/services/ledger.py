from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import case, desc, func, select
from sqlalchemy.orm import Session

from barpoints.core.database import atomic
from barpoints.core.errors import InsufficientPoints, InvalidInput, NotFound
from barpoints.models.ledger import DEBIT_TYPES, LedgerEntry, LedgerType
from barpoints.models.user import User

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.utcnow()


def lock_user(db: Session, user_id: int) -> User:
    """
    Берём пользователя под блокировку строки (PostgreSQL SELECT FOR UPDATE).
    Все списания/начисления по одному пользователю идут последовательно.
    """
    user = db.scalar(select(User).where(User.id == user_id).with_for_update())
    if not user:
        raise NotFound("Пользователь не найден")
    return user


def append_entry(
    db: Session,
    user: User,
    entry_type: LedgerType | str,
    amount: int,
    description: str = "",
    sale_id: int | None = None,
    order_id: int | None = None,
    now: datetime | None = None,
) -> LedgerEntry:
    """
    Добавляет запись в леджер и обновляет кэш user.points.
    Не коммитит - вызывающий код решает, где граница транзакции.
    """
    entry_type = LedgerType(entry_type)
    if isinstance(amount, bool) or int(amount) <= 0:
        raise InvalidInput("Сумма баллов должна быть больше 0")
    amount = int(amount)

    current = int(user.points or 0)
    if entry_type.value in DEBIT_TYPES:
        if current < amount:
            raise InsufficientPoints(f"Недостаточно баллов: доступно {current}, нужно {amount}")
        user.points = current - amount
    else:
        user.points = current + amount

    entry = LedgerEntry(
        user_id=user.id,
        type=entry_type.value,
        amount=amount,
        description=(description or "")[:255],
        sale_id=sale_id,
        order_id=order_id,
        created_at=now or _now(),
    )
    db.add(entry)
    return entry


def _signed_amount():
    return case(
        (LedgerEntry.type.in_(DEBIT_TYPES), -LedgerEntry.amount),
        else_=LedgerEntry.amount,
    )


def ledger_balance(db: Session, user_id: int, until: datetime | None = None) -> int:
    """Баланс как сумма записей леджера (источник правды для user.points)."""
    q = select(func.coalesce(func.sum(_signed_amount()), 0)).where(LedgerEntry.user_id == user_id)
    if until is not None:
        q = q.where(LedgerEntry.created_at <= until)
    return int(db.scalar(q) or 0)


def sum_by_type(db: Session, user_id: int, entry_type: LedgerType | str, since: datetime | None = None) -> int:
    q = select(func.coalesce(func.sum(LedgerEntry.amount), 0)).where(
        LedgerEntry.user_id == user_id,
        LedgerEntry.type == LedgerType(entry_type).value,
    )
    if since is not None:
        q = q.where(LedgerEntry.created_at >= since)
    return int(db.scalar(q) or 0)


def list_entries(
    db: Session,
    user_id: int,
    entry_type: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[LedgerEntry]:
    q = select(LedgerEntry).where(LedgerEntry.user_id == user_id)
    if entry_type:
        q = q.where(LedgerEntry.type == LedgerType(entry_type).value)
    q = q.order_by(desc(LedgerEntry.created_at), desc(LedgerEntry.id)).offset(offset).limit(limit)
    return list(db.scalars(q).all())


def adjust_points(
    db: Session,
    user_id: int,
    entry_type: LedgerType | str,
    amount: int,
    description: str = "",
    now: datetime | None = None,
) -> LedgerEntry:
    """Ручная корректировка админом: только bonus / penalty."""
    entry_type = LedgerType(entry_type)
    if entry_type not in (LedgerType.BONUS, LedgerType.PENALTY):
        raise InvalidInput("Корректировка возможна только типами bonus или penalty")

    with atomic(db):
        user = lock_user(db, user_id)
        entry = append_entry(db, user, entry_type, amount, description or entry_type.value, now=now)

    db.refresh(entry)
    logger.info("Ledger adjust user=%s %s %s", user_id, entry_type.value, amount)
    return entry

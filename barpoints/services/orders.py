from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from barpoints.core.database import atomic
from barpoints.core.errors import InvalidInput, InvalidTransition, NotFound, retry_on_conflict
from barpoints.models.catalog import Prize
from barpoints.models.ledger import LedgerType
from barpoints.models.order import Order, OrderStatus, OrderStatusEntry
from barpoints.services.ledger import append_entry, lock_user

logger = logging.getLogger(__name__)


# pending -> confirmed -> processing -> shipped -> delivered
# cancelled - только из pending / confirmed
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    OrderStatus.PENDING.value: frozenset({OrderStatus.CONFIRMED.value, OrderStatus.CANCELLED.value}),
    OrderStatus.CONFIRMED.value: frozenset({OrderStatus.PROCESSING.value, OrderStatus.CANCELLED.value}),
    OrderStatus.PROCESSING.value: frozenset({OrderStatus.SHIPPED.value}),
    OrderStatus.SHIPPED.value: frozenset({OrderStatus.DELIVERED.value}),
    OrderStatus.DELIVERED.value: frozenset(),
    OrderStatus.CANCELLED.value: frozenset(),
}

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value})


def _now() -> datetime:
    return datetime.utcnow()


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def can_be_cancelled(order: Order) -> bool:
    return can_transition(order.status, OrderStatus.CANCELLED.value)


def _parse_status(value: str) -> str:
    try:
        return OrderStatus(str(value or "").strip().lower()).value
    except ValueError:
        raise InvalidInput(f"Неизвестный статус заказа: {value}")


def get_order(db: Session, order_id: int, user_id: int | None = None) -> Order:
    order = db.get(Order, order_id)
    if not order or (user_id is not None and order.user_id != user_id):
        raise NotFound("Заказ не найден")
    return order


def _lock_order(db: Session, order_id: int, user_id: int | None = None) -> Order:
    order = db.scalar(select(Order).where(Order.id == order_id).with_for_update())
    if not order or (user_id is not None and order.user_id != user_id):
        raise NotFound("Заказ не найден")
    return order


def list_orders(db: Session, user_id: int, limit: int = 10, offset: int = 0) -> tuple[list[Order], int]:
    rows = db.scalars(
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(desc(Order.created_at), desc(Order.id))
        .offset(offset)
        .limit(limit)
    ).all()
    total = db.scalar(select(func.count(Order.id)).where(Order.user_id == user_id)) or 0
    return list(rows), int(total)


def _refund(db: Session, order: Order, now: datetime) -> None:
    user = lock_user(db, order.user_id)
    if int(order.total_cost) > 0:
        append_entry(
            db,
            user,
            LedgerType.REFUND,
            int(order.total_cost),
            description=f"Возврат за отменённый заказ: {order.order_number}",
            order_id=order.id,
            now=now,
        )

    # вернуть призы в наличие (если приз ещё существует)
    for item in order.items:
        if item.prize_id is None:
            continue
        prize = db.scalar(select(Prize).where(Prize.id == item.prize_id).with_for_update())
        if prize:
            prize.quantity = int(prize.quantity or 0) + int(item.quantity)


def _apply(db: Session, order: Order, new_status: str, comment: str | None, now: datetime) -> None:
    if not can_transition(order.status, new_status):
        raise InvalidTransition(f"Переход {order.status} -> {new_status} недопустим")

    if new_status == OrderStatus.CANCELLED.value:
        _refund(db, order, now)
    if new_status == OrderStatus.DELIVERED.value:
        order.actual_delivery = now

    order.status = new_status
    order.history.append(OrderStatusEntry(status=new_status, comment=comment, created_at=now))


@retry_on_conflict
def transition(
    db: Session,
    order_id: int,
    new_status: str,
    comment: str | None = None,
    now: datetime | None = None,
) -> Order:
    now = now or _now()
    new_status = _parse_status(new_status)

    with atomic(db):
        order = _lock_order(db, order_id)
        old_status = order.status
        _apply(db, order, new_status, comment, now)

    db.refresh(order)
    logger.info("Order %s: %s -> %s", order.order_number, old_status, new_status)
    return order


@retry_on_conflict
def cancel(
    db: Session,
    order_id: int,
    user_id: int | None = None,
    reason: str | None = None,
    now: datetime | None = None,
) -> Order:
    now = now or _now()

    with atomic(db):
        order = _lock_order(db, order_id, user_id=user_id)
        if not can_be_cancelled(order):
            raise InvalidTransition("Заказ нельзя отменить в текущем статусе")
        _apply(db, order, OrderStatus.CANCELLED.value, reason or "Отменено пользователем", now)

    db.refresh(order)
    logger.info("Order %s cancelled, refunded %s points", order.order_number, order.total_cost)
    return order


def update_delivery(
    db: Session,
    order_id: int,
    delivery_address: str | None,
    notes: str | None,
    user_id: int | None = None,
) -> Order:
    """Адрес и комментарий можно менять, пока заказ не в финальном статусе. Статус и история не трогаются."""
    with atomic(db):
        order = _lock_order(db, order_id, user_id=user_id)
        if order.status in TERMINAL_STATUSES:
            raise InvalidTransition("Нельзя изменить информацию о доставке для этого заказа")
        order.delivery_address = delivery_address
        order.notes = notes

    db.refresh(order)
    return order

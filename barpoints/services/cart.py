from __future__ import annotations

import logging
import secrets
import string
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from barpoints.core.database import atomic
from barpoints.core.errors import (
    EmptyCart,
    InsufficientPoints,
    InvalidQuantity,
    NotFound,
    PrizeUnavailable,
    retry_on_conflict,
)
from barpoints.models.cart import Cart, CartItem
from barpoints.models.catalog import Prize
from barpoints.models.ledger import LedgerType
from barpoints.models.order import Order, OrderItem, OrderStatus, OrderStatusEntry
from barpoints.services.ledger import append_entry, lock_user
from barpoints.services.program import get_program_settings

logger = logging.getLogger(__name__)

_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def _now() -> datetime:
    return datetime.utcnow()


def _validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantity("Количество должно быть целым числом от 1")
    return quantity


def _get_prize(db: Session, prize_id: int) -> Prize:
    prize = db.get(Prize, prize_id)
    if not prize:
        raise NotFound("Приз не найден")
    return prize


def _check_stock(prize: Prize, quantity: int) -> None:
    if not prize.is_active:
        raise PrizeUnavailable(f'Приз "{prize.name}" недоступен')
    if int(prize.quantity or 0) < quantity:
        raise PrizeUnavailable(f'Недостаточно призов "{prize.name}" в наличии')


def _find_item(cart: Cart, prize_id: int) -> CartItem | None:
    for item in cart.items:
        if item.prize_id == prize_id:
            return item
    return None


def generate_order_number(now: datetime | None = None) -> str:
    now = now or _now()
    suffix = "".join(secrets.choice(_ORDER_SUFFIX_ALPHABET) for _ in range(9))
    return f"ORD-{int(now.timestamp() * 1000)}-{suffix}"


def get_cart(db: Session, user_id: int) -> Cart | None:
    return db.scalar(select(Cart).where(Cart.user_id == user_id))


def get_or_create_cart(db: Session, user_id: int) -> Cart:
    cart = get_cart(db, user_id)
    if cart:
        return cart
    cart = Cart(user_id=user_id)
    db.add(cart)
    db.flush()
    return cart


def add_or_update(db: Session, user_id: int, prize_id: int, quantity: int = 1) -> Cart:
    """Добавляет приз; если он уже в корзине - увеличивает количество."""
    quantity = _validate_quantity(quantity)

    with atomic(db):
        prize = _get_prize(db, prize_id)
        cart = get_or_create_cart(db, user_id)

        item = _find_item(cart, prize_id)
        new_qty = quantity + (int(item.quantity) if item else 0)
        _check_stock(prize, new_qty)

        if item:
            item.quantity = new_qty
        else:
            cart.items.append(CartItem(prize_id=prize.id, quantity=quantity))
        cart.updated_at = _now()

    db.refresh(cart)
    return cart


def set_quantity(db: Session, user_id: int, prize_id: int, quantity: int) -> Cart:
    """Меньше 1 - ошибка, не удаление. Удалять надо явно через remove()."""
    quantity = _validate_quantity(quantity)

    with atomic(db):
        cart = get_cart(db, user_id)
        item = _find_item(cart, prize_id) if cart else None
        if not item:
            raise NotFound("Приза нет в корзине")

        _check_stock(_get_prize(db, prize_id), quantity)
        item.quantity = quantity
        cart.updated_at = _now()

    db.refresh(cart)
    return cart


def remove(db: Session, user_id: int, prize_id: int) -> Cart | None:
    """Нет корзины или строки - ничего не делает (и корзину не создаёт)."""
    cart = get_cart(db, user_id)
    if cart is None:
        return None

    with atomic(db):
        item = _find_item(cart, prize_id)
        if item:
            cart.items.remove(item)
            cart.updated_at = _now()

    db.refresh(cart)
    return cart


def clear(db: Session, user_id: int) -> None:
    with atomic(db):
        cart = get_cart(db, user_id)
        if cart:
            cart.items.clear()
            cart.updated_at = _now()


@retry_on_conflict
def checkout(
    db: Session,
    user_id: int,
    delivery_address: str | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> Order:
    """
    Корзина -> заказ. Одна транзакция:
      1) spent-запись в леджере на totalCost
      2) заказ со статусом pending и первой записью истории
      3) списание остатков призов
      4) очистка корзины
    Любая ошибка - rollback, ничего не меняется.
    """
    now = now or _now()
    program = get_program_settings(db)

    with atomic(db):
        # сначала пользователь: две параллельные оплаты упираются в эту блокировку
        user = lock_user(db, user_id)

        cart = get_cart(db, user_id)
        if not cart or not cart.items:
            raise EmptyCart("Корзина пуста")

        total = cart.total_cost
        if int(user.points or 0) < total:
            raise InsufficientPoints(
                f"Недостаточно баллов для оформления заказа: нужно {total}, доступно {int(user.points or 0)}"
            )

        prize_ids = [i.prize_id for i in cart.items]
        prizes = {
            p.id: p
            for p in db.scalars(select(Prize).where(Prize.id.in_(prize_ids)).with_for_update()).all()
        }
        for item in cart.items:
            prize = prizes.get(item.prize_id)
            if not prize:
                raise PrizeUnavailable("Приз из корзины больше не существует")
            _check_stock(prize, int(item.quantity))

        order = Order(
            order_number=generate_order_number(now),
            user_id=user.id,
            total_cost=total,
            status=OrderStatus.PENDING.value,
            delivery_address=delivery_address,
            notes=notes,
            estimated_delivery=now + timedelta(days=int(program.order_delivery_days)),
            created_at=now,
        )
        for item in cart.items:
            prize = prizes[item.prize_id]
            order.items.append(
                OrderItem(
                    prize_id=prize.id,
                    prize_name=prize.name,
                    prize_description=prize.description,
                    price_at_time=int(prize.cost),
                    quantity=int(item.quantity),
                )
            )
        order.history.append(
            OrderStatusEntry(status=OrderStatus.PENDING.value, comment="Заказ оформлен", created_at=now)
        )
        db.add(order)
        db.flush()

        if total > 0:
            append_entry(
                db,
                user,
                LedgerType.SPENT,
                total,
                description=f"Заказ призов: {order.order_number}",
                order_id=order.id,
                now=now,
            )

        for item in cart.items:
            prize = prizes[item.prize_id]
            prize.quantity = int(prize.quantity) - int(item.quantity)

        cart.items.clear()
        cart.updated_at = now

    db.refresh(order)
    logger.info("Checkout user=%s order=%s total=%s", user_id, order.order_number, order.total_cost)
    return order

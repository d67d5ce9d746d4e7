import logging
from datetime import datetime

import pytest

from barpoints.core.errors import InvalidInput, InvalidTransition, NotFound
from barpoints.models.order import Order
from barpoints.services import cart as cart_service
from barpoints.services import orders as order_service
from barpoints.services.ledger import ledger_balance, sum_by_type


@pytest.fixture
def placed(db, factory):
    user = factory.user(points=1000)
    prize = factory.prize(cost=200, quantity=5)
    cart_service.add_or_update(db, user.id, prize.id, 2)
    order = cart_service.checkout(db, user.id, delivery_address="Невский, 10")
    return user, prize, order


def test_forward_path_appends_one_history_entry_each(db, placed):
    _, _, order = placed
    for status in ("confirmed", "processing", "shipped"):
        order = order_service.transition(db, order.id, status, comment=f"-> {status}")
    delivered_at = datetime(2024, 5, 1, 10, 0)
    order = order_service.transition(db, order.id, "delivered", now=delivered_at)

    assert [h.status for h in order.history] == [
        "pending",
        "confirmed",
        "processing",
        "shipped",
        "delivered",
    ]
    assert order.actual_delivery == delivered_at
    assert order.status == "delivered"


@pytest.mark.parametrize(
    "path,bad",
    [
        ((), "shipped"),  # пропуск
        ((), "delivered"),
        (("confirmed",), "pending"),  # назад
        (("confirmed", "processing"), "cancelled"),
        (("confirmed", "processing", "shipped", "delivered"), "cancelled"),
    ],
)
def test_invalid_transitions(db, placed, path, bad):
    _, _, order = placed
    for status in path:
        order_service.transition(db, order.id, status)

    with pytest.raises(InvalidTransition):
        order_service.transition(db, order.id, bad)

    db.expire_all()
    assert len(order.history) == len(path) + 1


def test_unknown_status(db, placed):
    _, _, order = placed
    with pytest.raises(InvalidInput):
        order_service.transition(db, order.id, "lost")


def test_cancel_refunds_and_restocks(db, placed):
    user, prize, order = placed
    assert ledger_balance(db, user.id) == 600

    order = order_service.cancel(db, order.id, user_id=user.id, reason="Передумал")

    assert order.status == "cancelled"
    assert order.history[-1].status == "cancelled"
    assert order.history[-1].comment == "Передумал"

    db.expire_all()
    assert user.points == 1000
    assert ledger_balance(db, user.id) == 1000
    assert sum_by_type(db, user.id, "refund") == 400
    assert prize.quantity == 5


def test_cancel_after_confirmed_allowed(db, placed):
    user, _, order = placed
    order_service.transition(db, order.id, "confirmed")
    order = order_service.cancel(db, order.id, user_id=user.id)
    assert order.status == "cancelled"


def test_cancel_twice_rejected(db, placed):
    user, _, order = placed
    order_service.cancel(db, order.id, user_id=user.id)
    with pytest.raises(InvalidTransition):
        order_service.cancel(db, order.id, user_id=user.id)

    db.expire_all()
    assert sum_by_type(db, user.id, "refund") == 400


def test_admin_cancel_via_transition_refunds(db, placed):
    user, _, order = placed
    order_service.transition(db, order.id, "cancelled", comment="Нет в наличии")

    db.expire_all()
    assert user.points == 1000


def test_foreign_order_not_visible(db, factory, placed):
    _, _, order = placed
    stranger = factory.user()

    with pytest.raises(NotFound):
        order_service.get_order(db, order.id, user_id=stranger.id)
    with pytest.raises(NotFound):
        order_service.cancel(db, order.id, user_id=stranger.id)


def test_update_delivery_keeps_status_and_history(db, placed):
    user, _, order = placed
    order_service.transition(db, order.id, "confirmed")

    order = order_service.update_delivery(db, order.id, "Литейный, 5", "домофон 12", user_id=user.id)

    assert order.delivery_address == "Литейный, 5"
    assert order.notes == "домофон 12"
    assert order.status == "confirmed"
    assert len(order.history) == 2


def test_update_delivery_rejected_when_terminal(db, placed):
    user, _, order = placed
    order_service.cancel(db, order.id, user_id=user.id)

    with pytest.raises(InvalidTransition):
        order_service.update_delivery(db, order.id, "Литейный, 5", None, user_id=user.id)


def test_list_orders_newest_first(db, factory):
    user = factory.user(points=1000)
    prize = factory.prize(cost=100)
    for _ in range(3):
        cart_service.add_or_update(db, user.id, prize.id, 1)
        cart_service.checkout(db, user.id)

    rows, total = order_service.list_orders(db, user.id, limit=2)
    assert total == 3
    assert len(rows) == 2
    assert rows[0].id > rows[1].id


def test_cancel_racing_transition_rechecks_status(db, session_factory, placed, caplog):
    user, prize, order = placed

    other = session_factory()
    try:
        # вторая сессия видит заказ ещё в pending
        stale = other.get(Order, order.id)
        assert stale.status == "pending"

        order_service.transition(db, order.id, "confirmed")
        order_service.transition(db, order.id, "processing")

        with caplog.at_level(logging.WARNING, logger="barpoints.core.errors"):
            with pytest.raises(InvalidTransition):
                order_service.cancel(other, order.id, user_id=user.id)
        assert "retrying once" in caplog.text
    finally:
        other.close()

    db.expire_all()
    assert order.status == "processing"
    assert [h.status for h in order.history] == ["pending", "confirmed", "processing"]
    assert user.points == 600
    assert sum_by_type(db, user.id, "refund") == 0
    assert prize.quantity == 3

from decimal import Decimal
from types import SimpleNamespace

import pytest

from barpoints.core.errors import InvalidInput, NotFound
from barpoints.models.ledger import LedgerEntry
from barpoints.services.ledger import ledger_balance
from barpoints.services.points import calculate_points
from barpoints.services.sales import list_sales, quote_sale, record_sale


def _product(**kw):
    base = dict(
        bottle_price=Decimal("1000"),
        portions_per_bottle=Decimal("20"),
        points_mode="per_ruble",
        points_per_portion=0,
        points_per_ruble=Decimal("0.5"),
    )
    base.update(kw)
    return SimpleNamespace(**base)


def test_per_ruble_scenario():
    q = calculate_points(_product(), 4)
    assert q.price_per_portion == Decimal("50.00")
    assert q.total_price == Decimal("200.00")
    assert q.points == 100


def test_per_portion_mode():
    q = calculate_points(_product(points_mode="per_portion", points_per_portion=15), 3)
    assert q.points == 45
    assert q.total_price == Decimal("150.00")


def test_per_ruble_floors_unrounded_price():
    # 100 / 3 = 33.333.. * 1 = 33.333.. -> 33 балла
    q = calculate_points(_product(bottle_price=Decimal("100"), portions_per_bottle=Decimal("3"), points_per_ruble=Decimal("1")), 1)
    assert q.total_price == Decimal("33.33")
    assert q.points == 33


def test_points_monotonic_in_quantity():
    product = _product(points_per_ruble=Decimal("0.37"))
    prev = -1
    for qty in range(1, 30):
        pts = calculate_points(product, qty).points
        assert pts >= prev
        prev = pts


@pytest.mark.parametrize("qty", [0, -1, True, 1.5])
def test_invalid_quantity(qty):
    with pytest.raises(InvalidInput):
        calculate_points(_product(), qty)


def test_zero_portions_rejected():
    with pytest.raises(InvalidInput):
        calculate_points(_product(portions_per_bottle=Decimal("0")), 1)


def test_missing_pricing_field_rejected():
    with pytest.raises(InvalidInput):
        calculate_points(_product(bottle_price=None), 1)


def test_unknown_mode_rejected():
    with pytest.raises(InvalidInput):
        calculate_points(_product(points_mode="per_bottle"), 1)


def test_record_sale_credits_points_and_earnings(db, factory):
    user = factory.user()
    product = factory.product()

    sale = record_sale(db, user.id, product.id, 4, proof_type="photo", proof_file="uploads/p1.jpg")

    assert sale.points == 100
    assert sale.price == Decimal("200.00")

    db.refresh(user)
    assert user.points == 100
    assert ledger_balance(db, user.id) == 100
    assert Decimal(str(user.earnings_balance)) == Decimal("100")
    assert Decimal(str(user.total_earnings)) == Decimal("100")

    entry = db.query(LedgerEntry).filter(LedgerEntry.sale_id == sale.id).one()
    assert entry.type == "earned"
    assert entry.amount == 100


def test_record_sale_inactive_product(db, factory):
    user = factory.user()
    product = factory.product(is_active=False)

    with pytest.raises(NotFound):
        record_sale(db, user.id, product.id, 1)
    with pytest.raises(NotFound):
        quote_sale(db, product.id, 1)


def test_record_sale_invalid_quantity_leaves_no_trace(db, factory):
    user = factory.user()
    product = factory.product()

    with pytest.raises(InvalidInput):
        record_sale(db, user.id, product.id, 0)

    rows, total = list_sales(db, user.id)
    assert rows == [] and total == 0
    db.refresh(user)
    assert user.points == 0

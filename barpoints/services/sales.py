from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from barpoints.core.config import settings as env_settings
from barpoints.core.database import atomic
from barpoints.core.errors import InvalidInput, NotFound
from barpoints.models.catalog import Product
from barpoints.models.ledger import LedgerType
from barpoints.models.sale import Sale
from barpoints.services.ledger import append_entry, lock_user
from barpoints.services.points import PointsQuote, calculate_points

logger = logging.getLogger(__name__)

PROOF_TYPES = ("receipt", "photo")


def _now() -> datetime:
    return datetime.utcnow()


def get_active_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product or not product.is_active:
        raise NotFound("Выбранный продукт не найден или неактивен")
    return product


def quote_sale(db: Session, product_id: int, quantity: int) -> PointsQuote:
    return calculate_points(get_active_product(db, product_id), quantity)


def record_sale(
    db: Session,
    user_id: int,
    product_id: int,
    quantity: int,
    proof_type: str = "receipt",
    proof_file: str | None = None,
    now: datetime | None = None,
) -> Sale:
    """
    Продажа -> Sale + earned-запись в леджере + начисление заработка (₽).
    Всё одной транзакцией.
    """
    now = now or _now()
    proof_type = (proof_type or "receipt").strip().lower()
    if proof_type not in PROOF_TYPES:
        raise InvalidInput("Тип подтверждения: receipt или photo")

    with atomic(db):
        product = get_active_product(db, product_id)
        quote = calculate_points(product, quantity)

        user = lock_user(db, user_id)

        sale = Sale(
            user_id=user.id,
            product_id=product.id,
            quantity=quantity,
            price=quote.total_price,
            points=quote.points,
            proof_type=proof_type,
            proof_file=proof_file,
            created_at=now,
        )
        db.add(sale)
        db.flush()

        if quote.points > 0:
            append_entry(
                db,
                user,
                LedgerType.EARNED,
                quote.points,
                description=f"Продажа {product.name} x{quantity}",
                sale_id=sale.id,
                now=now,
            )
            earned_money = Decimal(quote.points) * Decimal(str(env_settings.EARNINGS_PER_POINT))
            user.earnings_balance = Decimal(str(user.earnings_balance or 0)) + earned_money
            user.total_earnings = Decimal(str(user.total_earnings or 0)) + earned_money

    db.refresh(sale)
    logger.info("Sale recorded user=%s product=%s qty=%s points=%s", user_id, product_id, quantity, sale.points)
    return sale


def list_sales(db: Session, user_id: int, limit: int = 10, offset: int = 0) -> tuple[list[Sale], int]:
    rows = db.scalars(
        select(Sale)
        .where(Sale.user_id == user_id)
        .order_by(desc(Sale.created_at), desc(Sale.id))
        .offset(offset)
        .limit(limit)
    ).all()
    total = db.scalar(select(func.count(Sale.id)).where(Sale.user_id == user_id)) or 0
    return list(rows), int(total)

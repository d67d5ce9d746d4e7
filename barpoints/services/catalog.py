from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from barpoints.core.errors import InvalidInput, NotFound
from barpoints.models.catalog import Brand, Category, PointsMode, Prize, Product
from barpoints.models.venue import Bar, City

logger = logging.getLogger(__name__)

PRIZE_CATEGORIES = ("merchandise", "discount", "experience", "cash", "other")

PRIZE_FIELDS = ("name", "description", "cost", "category", "quantity", "image_url", "is_active")
PRODUCT_FIELDS = (
    "name",
    "brand_id",
    "category_id",
    "bottle_price",
    "portions_per_bottle",
    "points_mode",
    "points_per_portion",
    "points_per_ruble",
    "description",
    "is_active",
)


def list_prizes(db: Session, user_points: int | None = None, category: str | None = None) -> list[dict]:
    """Активные призы, самые дешёвые сверху. can_afford - хватает ли баллов у смотрящего."""
    q = select(Prize).where(Prize.is_active.is_(True))
    if category:
        q = q.where(Prize.category == category)
    q = q.order_by(Prize.cost.asc(), Prize.id.asc())

    out = []
    for p in db.scalars(q).all():
        out.append(
            {
                "id": p.id,
                "name": p.name,
                "description": p.description,
                "cost": int(p.cost),
                "category": p.category,
                "quantity": int(p.quantity or 0),
                "image_url": p.image_url,
                "is_available": p.is_available,
                "can_afford": user_points is not None and int(user_points) >= int(p.cost),
            }
        )
    return out


def _check_prize(prize: Prize) -> None:
    if not (prize.name or "").strip():
        raise InvalidInput("Название приза обязательно")
    if int(prize.cost) < 0:
        raise InvalidInput("Стоимость приза не может быть отрицательной")
    if int(prize.quantity or 0) < 0:
        raise InvalidInput("Остаток приза не может быть отрицательным")
    if prize.category not in PRIZE_CATEGORIES:
        raise InvalidInput(f"Категория приза: {', '.join(PRIZE_CATEGORIES)}")


def create_prize(db: Session, **fields) -> Prize:
    prize = Prize(**{k: v for k, v in fields.items() if k in PRIZE_FIELDS and v is not None})
    prize.category = prize.category or "other"
    prize.description = prize.description or ""
    prize.quantity = prize.quantity or 0
    _check_prize(prize)

    db.add(prize)
    db.commit()
    db.refresh(prize)
    logger.info("Prize created id=%s name=%s", prize.id, prize.name)
    return prize


def update_prize(db: Session, prize_id: int, **fields) -> Prize:
    prize = db.get(Prize, prize_id)
    if not prize:
        raise NotFound("Приз не найден")

    for key, value in fields.items():
        if key in PRIZE_FIELDS and value is not None:
            setattr(prize, key, value)
    try:
        _check_prize(prize)
    except InvalidInput:
        db.rollback()
        raise

    db.commit()
    db.refresh(prize)
    return prize


def _check_product(db: Session, product: Product) -> None:
    if not (product.name or "").strip():
        raise InvalidInput("Название продукта обязательно")
    if not db.get(Brand, product.brand_id):
        raise NotFound("Бренд не найден")
    if not db.get(Category, product.category_id):
        raise NotFound("Категория не найдена")
    if product.bottle_price is None or Decimal(str(product.bottle_price)) < 0:
        raise InvalidInput("Цена бутылки должна быть неотрицательной")
    if product.portions_per_bottle is None or Decimal(str(product.portions_per_bottle)) <= 0:
        raise InvalidInput("Количество порций в бутылке должно быть больше 0")
    try:
        PointsMode(product.points_mode)
    except ValueError:
        raise InvalidInput("Режим начисления: per_portion или per_ruble")


def create_product(db: Session, **fields) -> Product:
    product = Product(**{k: v for k, v in fields.items() if k in PRODUCT_FIELDS and v is not None})
    # 0 не подменяется дефолтом: его должна отклонить проверка ниже
    if product.portions_per_bottle is None:
        product.portions_per_bottle = Decimal("12")
    if product.points_mode is None:
        product.points_mode = PointsMode.PER_RUBLE.value
    _check_product(db, product)

    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info("Product created id=%s name=%s", product.id, product.name)
    return product


def update_product(db: Session, product_id: int, **fields) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise NotFound("Продукт не найден")

    for key, value in fields.items():
        if key in PRODUCT_FIELDS and value is not None:
            setattr(product, key, value)
    try:
        _check_product(db, product)
    except (InvalidInput, NotFound):
        db.rollback()
        raise

    db.commit()
    db.refresh(product)
    return product


def list_products(db: Session) -> list[Product]:
    """Активные продукты для формы продажи, по алфавиту."""
    return list(
        db.scalars(
            select(Product).where(Product.is_active.is_(True)).order_by(Product.name.asc(), Product.id.asc())
        ).all()
    )


# -------------------------
# Справочники: бренды, категории, города, бары
# -------------------------

def _clean_name(name: str | None, what: str) -> str:
    value = (name or "").strip()
    if not value:
        raise InvalidInput(f"Название ({what}) обязательно")
    return value


def _name_taken(db: Session, model, name: str, exclude_id: int | None = None, **scope) -> bool:
    q = select(func.count(model.id)).where(func.lower(model.name) == name.lower())
    for key, value in scope.items():
        q = q.where(getattr(model, key) == value)
    if exclude_id is not None:
        q = q.where(model.id != exclude_id)
    return bool(db.scalar(q))


def _list_named(db: Session, model) -> list:
    return list(db.scalars(select(model).order_by(model.name.asc(), model.id.asc())).all())


def _create_named(db: Session, model, name: str, what: str):
    name = _clean_name(name, what)
    if _name_taken(db, model, name):
        raise InvalidInput(f"{what.capitalize()} с таким именем уже существует", code="duplicate_name")
    row = model(name=name)
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("%s created id=%s name=%s", model.__name__, row.id, row.name)
    return row


def _rename(db: Session, model, row_id: int, name: str, what: str):
    row = db.get(model, row_id)
    if not row:
        raise NotFound(f"{what.capitalize()} не найден(а)")
    name = _clean_name(name, what)
    if _name_taken(db, model, name, exclude_id=row.id):
        raise InvalidInput(f"{what.capitalize()} с таким именем уже существует", code="duplicate_name")
    row.name = name
    db.commit()
    db.refresh(row)
    return row


def list_brands(db: Session) -> list[Brand]:
    return _list_named(db, Brand)


def create_brand(db: Session, name: str) -> Brand:
    return _create_named(db, Brand, name, "бренд")


def update_brand(db: Session, brand_id: int, name: str) -> Brand:
    return _rename(db, Brand, brand_id, name, "бренд")


def list_categories(db: Session) -> list[Category]:
    return _list_named(db, Category)


def create_category(db: Session, name: str) -> Category:
    return _create_named(db, Category, name, "категория")


def update_category(db: Session, category_id: int, name: str) -> Category:
    return _rename(db, Category, category_id, name, "категория")


def list_cities(db: Session) -> list[City]:
    return _list_named(db, City)


def create_city(db: Session, name: str) -> City:
    return _create_named(db, City, name, "город")


def list_bars(db: Session, city_id: int | None = None) -> list[Bar]:
    q = select(Bar)
    if city_id is not None:
        q = q.where(Bar.city_id == city_id)
    return list(db.scalars(q.order_by(Bar.name.asc(), Bar.id.asc())).all())


def create_bar(db: Session, city_id: int, name: str, address: str | None = None) -> Bar:
    """Имя бара уникально в пределах города."""
    if not db.get(City, city_id):
        raise NotFound("Город не найден")
    name = _clean_name(name, "бар")
    if _name_taken(db, Bar, name, city_id=city_id):
        raise InvalidInput("Бар с таким именем уже существует в этом городе", code="duplicate_name")

    bar = Bar(city_id=city_id, name=name, address=(address or "").strip() or None)
    db.add(bar)
    db.commit()
    db.refresh(bar)
    logger.info("Bar created id=%s city=%s name=%s", bar.id, city_id, bar.name)
    return bar

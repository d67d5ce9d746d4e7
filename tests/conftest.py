import os

# до импорта barpoints: движок по умолчанию не должен создавать файл БД
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from barpoints.core.database import Base, get_db
from barpoints.models import Bar, Brand, Category, City, Prize, Product, User
from barpoints.models.ledger import LedgerType
from barpoints.services.ledger import append_entry


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    from main import app

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class Factory:
    """Наполнение тестовой БД: город/бар, пользователи, продукты, призы."""

    def __init__(self, db):
        self.db = db
        self._n = 0
        self._city = None
        self._bar = None

    def _next(self) -> int:
        self._n += 1
        return self._n

    def venue(self):
        if self._bar is None:
            self._city = City(name="Москва")
            self.db.add(self._city)
            self.db.flush()
            self._bar = Bar(city_id=self._city.id, name="Бар на Тверской", address="Тверская, 1")
            self.db.add(self._bar)
            self.db.commit()
        return self._city, self._bar

    def user(
        self,
        role: str = "bartender",
        points: int = 0,
        earnings: Decimal | str | int = 0,
        created_at: datetime | None = None,
        is_active: bool = True,
        name: str | None = None,
    ) -> User:
        city, bar = self.venue()
        n = self._next()
        user = User(
            name=name or f"Бармен {n}",
            email=f"user{n}@example.com",
            phone="79990000000",
            role=role,
            city_id=city.id,
            bar_id=bar.id,
            points=0,
            earnings_balance=Decimal(str(earnings)),
            total_earnings=Decimal(str(earnings)),
            is_active=is_active,
            created_at=created_at or datetime(2024, 1, 1, 12, 0),
        )
        self.db.add(user)
        self.db.flush()
        if points:
            append_entry(self.db, user, LedgerType.BONUS, points, description="Стартовый бонус", now=created_at)
        self.db.commit()
        self.db.refresh(user)
        return user

    def product(
        self,
        bottle_price="1000",
        portions="20",
        mode: str = "per_ruble",
        per_portion: int = 0,
        per_ruble="0.5",
        is_active: bool = True,
    ) -> Product:
        brand = self.db.query(Brand).first()
        if brand is None:
            brand = Brand(name="Partner Spirits")
            category = Category(name="Виски")
            self.db.add_all([brand, category])
            self.db.flush()
        category = self.db.query(Category).first()

        product = Product(
            name=f"Продукт {self._next()}",
            brand_id=brand.id,
            category_id=category.id,
            bottle_price=Decimal(str(bottle_price)),
            portions_per_bottle=Decimal(str(portions)),
            points_mode=mode,
            points_per_portion=per_portion,
            points_per_ruble=Decimal(str(per_ruble)),
            is_active=is_active,
        )
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def prize(self, cost: int = 100, quantity: int = 10, is_active: bool = True, name: str | None = None) -> Prize:
        prize = Prize(
            name=name or f"Приз {self._next()}",
            description="Фирменный мерч",
            cost=cost,
            category="merchandise",
            quantity=quantity,
            is_active=is_active,
        )
        self.db.add(prize)
        self.db.commit()
        self.db.refresh(prize)
        return prize


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
def auth():
    def _headers(user) -> dict:
        return {"X-User-Id": str(user.id)}

    return _headers

from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from barpoints.core.config import settings
from barpoints.core.errors import ConcurrencyConflict


def _connect_args(url: str) -> dict:
    # sqlite + FastAPI threadpool
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.SQL_ECHO,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session):
    """
    Одна логическая транзакция: commit в конце, rollback при любой ошибке.
    StaleDataError (version_id_col) -> ConcurrencyConflict.
    """
    try:
        yield db
        db.commit()
    except StaleDataError as e:
        db.rollback()
        raise ConcurrencyConflict("Данные изменились параллельно, повторите запрос") from e
    except Exception:
        db.rollback()
        raise

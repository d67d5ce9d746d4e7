from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from barpoints.core.errors import NotFound
from barpoints.models.user import User, normalize_role


def _ref(obj) -> dict | None:
    if obj is None:
        return None
    return {"id": int(obj.id), "name": obj.name}


def user_view(user: User) -> dict:
    """
    Денормализованное представление пользователя.
    Город и бар всегда разворачиваются в {id, name} здесь, а не на местах.
    """
    return {
        "id": int(user.id),
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "role": normalize_role(user.role).value,
        "city": _ref(user.city),
        "bar": _ref(user.bar),
        "points": int(user.points or 0),
        "earnings_balance": Decimal(str(user.earnings_balance or 0)),
        "total_earnings": Decimal(str(user.total_earnings or 0)),
        "is_active": bool(user.is_active),
        "created_at": user.created_at,
    }


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("Пользователь не найден")
    return user

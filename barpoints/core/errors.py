# barpoints/core/errors.py
"""
Доменные ошибки.

Сервисы бросают их, а обработчик в main.py превращает в JSON:
    {"detail": <сообщение>, "code": <код>}
со статусом из `status_code`.
"""
from __future__ import annotations

import functools
import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LoyaltyError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, message: str = "", code: str | None = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        if code:
            self.code = code


class InvalidInput(LoyaltyError):
    code = "invalid_input"


class InvalidQuantity(InvalidInput):
    code = "invalid_quantity"


class PrizeUnavailable(InvalidInput):
    code = "prize_unavailable"


class InsufficientPoints(LoyaltyError):
    code = "insufficient_points"


class InsufficientFunds(LoyaltyError):
    code = "insufficient_funds"


class EmptyCart(LoyaltyError):
    code = "empty_cart"


class NotFound(LoyaltyError):
    status_code = 404
    code = "not_found"


class InvalidTransition(LoyaltyError):
    status_code = 409
    code = "invalid_transition"


class ConcurrencyConflict(LoyaltyError):
    status_code = 409
    code = "concurrency_conflict"


class PermissionDenied(LoyaltyError):
    status_code = 403
    code = "forbidden"


def retry_on_conflict(fn):
    """Повторяет операцию один раз при ConcurrencyConflict.

    Первым позиционным аргументом функции должен быть Session.
    """

    @functools.wraps(fn)
    def wrapper(db, *args, **kwargs):
        try:
            return fn(db, *args, **kwargs)
        except ConcurrencyConflict:
            logger.warning("Concurrency conflict in %s, retrying once", fn.__name__)
            db.rollback()
            db.expire_all()
            return fn(db, *args, **kwargs)

    return wrapper


async def loyalty_error_handler(request: Request, exc: LoyaltyError) -> JSONResponse:
    return JSONResponse(
        {"detail": exc.message, "code": exc.code},
        status_code=exc.status_code,
    )

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_FLOOR, ROUND_HALF_UP

from barpoints.core.errors import InvalidInput
from barpoints.models.catalog import PointsMode


@dataclass(frozen=True)
class PointsQuote:
    price_per_portion: Decimal
    total_price: Decimal
    points: int


def _q2(x: Decimal) -> Decimal:
    return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _dec(value, field: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise InvalidInput(f"У продукта не заполнено поле {field}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInput(f"Некорректное значение поля {field}")


def calculate_points(product, quantity: int) -> PointsQuote:
    """
    Цена и баллы за продажу `quantity` порций продукта.

    pricePerPortion = bottle_price / portions_per_bottle
    totalPrice      = pricePerPortion * quantity
    per_portion:  points = quantity * points_per_portion
    per_ruble:    points = floor(totalPrice * points_per_ruble)

    Чистая функция: ничего не пишет в БД.
    """
    if product is None:
        raise InvalidInput("Продукт не указан")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidInput("Количество порций должно быть целым числом от 1")

    bottle_price = _dec(getattr(product, "bottle_price", None), "bottle_price")
    portions = _dec(getattr(product, "portions_per_bottle", None), "portions_per_bottle")
    if portions <= 0:
        raise InvalidInput("Количество порций в бутылке должно быть больше 0")
    if bottle_price < 0:
        raise InvalidInput("Цена бутылки не может быть отрицательной")

    price_per_portion = bottle_price / portions
    raw_total = price_per_portion * quantity

    mode = str(getattr(product, "points_mode", "") or "")
    if mode == PointsMode.PER_PORTION.value:
        per_portion = _dec(getattr(product, "points_per_portion", None), "points_per_portion")
        if per_portion < 0:
            raise InvalidInput("points_per_portion не может быть отрицательным")
        points = int(per_portion) * quantity
    elif mode == PointsMode.PER_RUBLE.value:
        per_ruble = _dec(getattr(product, "points_per_ruble", None), "points_per_ruble")
        if per_ruble < 0:
            raise InvalidInput("points_per_ruble не может быть отрицательным")
        points = int((raw_total * per_ruble).to_integral_value(rounding=ROUND_FLOOR))
    else:
        raise InvalidInput(f"Неизвестный режим начисления баллов: {mode or '-'}")

    return PointsQuote(
        price_per_portion=_q2(price_per_portion),
        total_price=_q2(raw_total),
        points=points,
    )

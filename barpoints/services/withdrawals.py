from __future__ import annotations

import logging
import secrets
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from barpoints.core.database import atomic
from barpoints.core.errors import InsufficientFunds, InvalidInput, InvalidTransition, NotFound
from barpoints.core.security import is_valid_sbp_phone, normalize_phone
from barpoints.models.user import User
from barpoints.models.withdrawal import WithdrawalRequest, WithdrawalStatus
from barpoints.services.ledger import lock_user
from barpoints.services.program import get_program_settings

logger = logging.getLogger(__name__)

# статусы, которые считаются "выведено" (деньги ушли или уходят)
WITHDRAWN_STATUSES = (WithdrawalStatus.PENDING.value, WithdrawalStatus.COMPLETED.value)
# при этих статусах сумма возвращается на баланс
RETURNED_STATUSES = (WithdrawalStatus.FAILED.value, WithdrawalStatus.CANCELLED.value)


def _now() -> datetime:
    return datetime.utcnow()


def _money(value) -> Decimal:
    return Decimal(str(value or 0))


def _parse_amount(raw) -> Decimal:
    if raw is None or isinstance(raw, bool) or (isinstance(raw, str) and not raw.strip()):
        raise InvalidInput("Укажите сумму для вывода", code="amount_invalid")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise InvalidInput("Укажите корректную сумму", code="amount_invalid")
    if not amount.is_finite() or amount <= 0:
        raise InvalidInput("Укажите корректную сумму", code="amount_invalid")
    return amount


def compute_commission(amount: Decimal, rate: Decimal) -> tuple[Decimal, Decimal]:
    """commission = round(amount * rate) до рубля; к получению = amount - commission (не меньше 0)."""
    amount = _money(amount)
    commission = (amount * _money(rate)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    to_receive = max(amount - commission, Decimal("0"))
    return commission, to_receive


def generate_external_id(now: datetime | None = None) -> str:
    now = now or _now()
    return f"TXN_{int(now.timestamp() * 1000)}_{secrets.token_hex(4).upper()}"


def withdrawn_total(db: Session, user_id: int) -> Decimal:
    total = db.scalar(
        select(func.coalesce(func.sum(WithdrawalRequest.amount), 0)).where(
            WithdrawalRequest.user_id == user_id,
            WithdrawalRequest.status.in_(WITHDRAWN_STATUSES),
        )
    )
    return _money(total)


def get_balance(db: Session, user_id: int) -> dict:
    program = get_program_settings(db)

    user = db.get(User, user_id)
    if not user:
        raise NotFound("Пользователь не найден")

    return {
        "total_earnings": _money(user.total_earnings),
        "available_balance": max(_money(user.earnings_balance), Decimal("0")),
        "withdrawn_amount": withdrawn_total(db, user_id),
        "points": int(user.points or 0),
        "min_withdraw_amount": _money(program.withdraw_min_amount),
        "max_withdraw_amount": _money(program.withdraw_max_amount),
        "commission_rate": _money(program.commission_rate),
    }


def create_withdrawal(
    db: Session,
    user_id: int,
    amount,
    phone: str | None,
    bank_name: str | None = None,
    now: datetime | None = None,
) -> WithdrawalRequest:
    """
    Проверки по порядку (первая же ошибка - отказ):
      сумма > 0 -> >= минимума -> <= максимума -> <= доступного баланса -> телефон 7XXXXXXXXXX
    С баланса списывается вся сумма, комиссия остаётся платформе.
    """
    now = now or _now()
    program = get_program_settings(db)

    value = _parse_amount(amount)
    min_amount = _money(program.withdraw_min_amount)
    max_amount = _money(program.withdraw_max_amount)
    if value < min_amount:
        raise InvalidInput(f"Минимальная сумма для вывода: {min_amount} ₽", code="amount_below_minimum")
    if value > max_amount:
        raise InvalidInput(f"Максимальная сумма для вывода: {max_amount} ₽", code="amount_above_maximum")

    with atomic(db):
        user = lock_user(db, user_id)

        available = _money(user.earnings_balance)
        if value > available:
            raise InsufficientFunds(f"Недостаточно средств. Доступно: {available} ₽")

        if not is_valid_sbp_phone(phone or ""):
            raise InvalidInput("Номер телефона должен содержать 11 цифр и начинаться с 7", code="phone_invalid")

        commission, to_receive = compute_commission(value, _money(program.commission_rate))

        wr = WithdrawalRequest(
            user_id=user.id,
            amount=value,
            commission=commission,
            amount_to_receive=to_receive,
            phone=normalize_phone(phone),
            bank_name=(bank_name or "").strip() or None,
            method="sbp",
            status=WithdrawalStatus.PENDING.value,
            external_id=generate_external_id(now),
            created_at=now,
        )
        db.add(wr)
        user.earnings_balance = available - value

    db.refresh(wr)
    logger.info("Withdrawal %s user=%s amount=%s commission=%s", wr.external_id, user_id, value, commission)
    return wr


def get_withdrawal(db: Session, withdrawal_id: int, user_id: int | None = None) -> WithdrawalRequest:
    wr = db.get(WithdrawalRequest, withdrawal_id)
    if not wr or (user_id is not None and wr.user_id != user_id):
        raise NotFound("Транзакция не найдена")
    return wr


def list_withdrawals(
    db: Session,
    user_id: int,
    status: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[WithdrawalRequest]:
    q = select(WithdrawalRequest).where(WithdrawalRequest.user_id == user_id)
    if status:
        q = q.where(WithdrawalRequest.status == status)
    q = q.order_by(desc(WithdrawalRequest.created_at), desc(WithdrawalRequest.id)).offset(offset).limit(limit)
    return list(db.scalars(q).all())


def set_withdrawal_status(
    db: Session,
    withdrawal_id: int,
    new_status: str,
    reason: str | None = None,
    user_id: int | None = None,
    now: datetime | None = None,
) -> WithdrawalRequest:
    """pending -> completed | failed | cancelled. failed/cancelled возвращают сумму на баланс."""
    now = now or _now()
    try:
        new_status = WithdrawalStatus(new_status).value
    except ValueError:
        raise InvalidInput(f"Неизвестный статус: {new_status}")

    with atomic(db):
        wr = db.scalar(
            select(WithdrawalRequest).where(WithdrawalRequest.id == withdrawal_id).with_for_update()
        )
        if not wr or (user_id is not None and wr.user_id != user_id):
            raise NotFound("Транзакция не найдена")
        if wr.status != WithdrawalStatus.PENDING.value or new_status == WithdrawalStatus.PENDING.value:
            raise InvalidTransition("Можно изменить только ожидающие обработки запросы")

        if new_status in RETURNED_STATUSES:
            user = lock_user(db, wr.user_id)
            user.earnings_balance = _money(user.earnings_balance) + _money(wr.amount)

        wr.status = new_status
        wr.processed_at = now
        if reason:
            wr.failure_reason = reason[:255]

    db.refresh(wr)
    logger.info("Withdrawal %s -> %s", wr.external_id, new_status)
    return wr


def cancel_withdrawal(db: Session, withdrawal_id: int, user_id: int, now: datetime | None = None) -> WithdrawalRequest:
    return set_withdrawal_status(
        db,
        withdrawal_id,
        WithdrawalStatus.CANCELLED.value,
        reason="Отменено пользователем",
        user_id=user_id,
        now=now,
    )

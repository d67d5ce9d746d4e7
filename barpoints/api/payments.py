from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from barpoints.core.context import RequestContext, get_context, require_admin
from barpoints.core.database import get_db
from barpoints.models.withdrawal import WithdrawalStatus
from barpoints.schemas.payment import (
    BalanceOut,
    WithdrawIn,
    WithdrawalListOut,
    WithdrawalOut,
    WithdrawalStatusIn,
)
from barpoints.services import withdrawals as withdrawal_service

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("/balance", response_model=BalanceOut)
def read_balance(ctx: RequestContext = Depends(get_context), db: Session = Depends(get_db)) -> BalanceOut:
    return BalanceOut.model_validate(withdrawal_service.get_balance(db, ctx.user_id))


@router.post("/withdraw", response_model=WithdrawalOut, status_code=201)
def withdraw(
    payload: WithdrawIn,
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> WithdrawalOut:
    wr = withdrawal_service.create_withdrawal(
        db,
        ctx.user_id,
        amount=payload.amount,
        phone=payload.phone,
        bank_name=payload.bank_name,
    )
    return WithdrawalOut.model_validate(wr)


@router.get("/withdrawals", response_model=WithdrawalListOut)
def read_withdrawals(
    status: Optional[WithdrawalStatus] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> WithdrawalListOut:
    rows = withdrawal_service.list_withdrawals(
        db,
        ctx.user_id,
        status=status.value if status else None,
        limit=limit,
        offset=offset,
    )
    return WithdrawalListOut(items=[WithdrawalOut.model_validate(r) for r in rows], limit=limit, offset=offset)


@router.get("/withdrawals/{withdrawal_id}", response_model=WithdrawalOut)
def read_withdrawal(
    withdrawal_id: int,
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> WithdrawalOut:
    owner = None if ctx.is_admin else ctx.user_id
    return WithdrawalOut.model_validate(withdrawal_service.get_withdrawal(db, withdrawal_id, user_id=owner))


@router.post("/withdrawals/{withdrawal_id}/cancel", response_model=WithdrawalOut)
def cancel_withdrawal(
    withdrawal_id: int,
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> WithdrawalOut:
    wr = withdrawal_service.cancel_withdrawal(db, withdrawal_id, user_id=ctx.user_id)
    return WithdrawalOut.model_validate(wr)


@router.post("/withdrawals/{withdrawal_id}/status", response_model=WithdrawalOut)
def set_withdrawal_status(
    withdrawal_id: int,
    payload: WithdrawalStatusIn,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> WithdrawalOut:
    wr = withdrawal_service.set_withdrawal_status(db, withdrawal_id, payload.status, reason=payload.reason)
    return WithdrawalOut.model_validate(wr)

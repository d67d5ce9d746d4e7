from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from barpoints.core.context import RequestContext, get_context, require_admin
from barpoints.core.database import get_db
from barpoints.models.order import Order
from barpoints.schemas.order import OrderCancelIn, OrderListOut, OrderOut, OrderStatusIn, OrderUpdateIn
from barpoints.services import orders as order_service

router = APIRouter(prefix="/orders", tags=["orders"])


def _order_out(order: Order) -> OrderOut:
    out = OrderOut.model_validate(order)
    out.can_be_cancelled = order_service.can_be_cancelled(order)
    return out


@router.get("", response_model=OrderListOut)
def read_orders(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> OrderListOut:
    rows, total = order_service.list_orders(db, ctx.user_id, limit=limit, offset=offset)
    return OrderListOut(items=[_order_out(o) for o in rows], total=total, limit=limit, offset=offset)


@router.get("/{order_id}", response_model=OrderOut)
def read_order(order_id: int, ctx: RequestContext = Depends(get_context), db: Session = Depends(get_db)) -> OrderOut:
    # админ видит любой заказ, остальные только свои
    owner = None if ctx.is_admin else ctx.user_id
    return _order_out(order_service.get_order(db, order_id, user_id=owner))


@router.put("/{order_id}", response_model=OrderOut)
def update_order(
    order_id: int,
    payload: OrderUpdateIn,
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> OrderOut:
    order = order_service.update_delivery(
        db,
        order_id,
        delivery_address=payload.delivery_address,
        notes=payload.notes,
        user_id=ctx.user_id,
    )
    return _order_out(order)


@router.post("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(
    order_id: int,
    payload: OrderCancelIn | None = None,
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> OrderOut:
    reason = payload.reason if payload else None
    return _order_out(order_service.cancel(db, order_id, user_id=ctx.user_id, reason=reason))


@router.post("/{order_id}/status", response_model=OrderOut)
def set_order_status(
    order_id: int,
    payload: OrderStatusIn,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> OrderOut:
    return _order_out(order_service.transition(db, order_id, payload.status, comment=payload.comment))

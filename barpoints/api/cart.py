from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from barpoints.core.context import RequestContext, get_context
from barpoints.core.database import get_db
from barpoints.models.cart import Cart
from barpoints.schemas.cart import CartItemIn, CartItemOut, CartOut, CheckoutIn
from barpoints.schemas.order import OrderOut
from barpoints.services import cart as cart_service
from barpoints.services.orders import can_be_cancelled

router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_out(cart: Cart | None) -> CartOut:
    if cart is None:
        return CartOut(items=[], total_cost=0, total_items=0)

    items = [
        CartItemOut(
            prize_id=i.prize_id,
            name=i.prize.name,
            cost=int(i.prize.cost),
            quantity=int(i.quantity),
            line_total=int(i.prize.cost) * int(i.quantity),
            is_available=i.prize.is_available,
        )
        for i in cart.items
    ]
    return CartOut(
        items=items,
        total_cost=cart.total_cost,
        total_items=sum(i.quantity for i in items),
    )


@router.get("", response_model=CartOut)
def read_cart(ctx: RequestContext = Depends(get_context), db: Session = Depends(get_db)) -> CartOut:
    return _cart_out(cart_service.get_cart(db, ctx.user_id))


@router.post("/items/{prize_id}", response_model=CartOut)
def add_item(
    prize_id: int,
    payload: CartItemIn | None = None,
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> CartOut:
    quantity = payload.quantity if payload else 1
    return _cart_out(cart_service.add_or_update(db, ctx.user_id, prize_id, quantity))


@router.put("/items/{prize_id}", response_model=CartOut)
def update_item(
    prize_id: int,
    payload: CartItemIn,
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> CartOut:
    return _cart_out(cart_service.set_quantity(db, ctx.user_id, prize_id, payload.quantity))


@router.delete("/items/{prize_id}", response_model=CartOut)
def remove_item(prize_id: int, ctx: RequestContext = Depends(get_context), db: Session = Depends(get_db)) -> CartOut:
    return _cart_out(cart_service.remove(db, ctx.user_id, prize_id))


@router.delete("", response_model=CartOut)
def clear_cart(ctx: RequestContext = Depends(get_context), db: Session = Depends(get_db)) -> CartOut:
    cart_service.clear(db, ctx.user_id)
    return _cart_out(cart_service.get_cart(db, ctx.user_id))


@router.post("/checkout", response_model=OrderOut, status_code=201)
def checkout(
    payload: CheckoutIn | None = None,
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> OrderOut:
    payload = payload or CheckoutIn()
    order = cart_service.checkout(
        db,
        ctx.user_id,
        delivery_address=payload.delivery_address,
        notes=payload.notes,
    )
    out = OrderOut.model_validate(order)
    out.can_be_cancelled = can_be_cancelled(order)
    return out

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from barpoints.core.context import RequestContext, get_context
from barpoints.core.database import get_db
from barpoints.models.sale import Sale
from barpoints.schemas.sale import QuoteOut, SaleCreate, SaleListOut, SaleOut
from barpoints.services.sales import list_sales, quote_sale, record_sale

router = APIRouter(prefix="/sales", tags=["sales"])


def _sale_out(sale: Sale) -> SaleOut:
    out = SaleOut.model_validate(sale)
    out.product_name = sale.product.name if sale.product else None
    return out


@router.get("/quote", response_model=QuoteOut)
def get_quote(
    product_id: int = Query(...),
    quantity: int = Query(...),
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> QuoteOut:
    q = quote_sale(db, product_id, quantity)
    return QuoteOut(
        product_id=product_id,
        quantity=quantity,
        price_per_portion=q.price_per_portion,
        total_price=q.total_price,
        points=q.points,
    )


@router.post("", response_model=SaleOut, status_code=201)
def create_sale(
    payload: SaleCreate,
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> SaleOut:
    sale = record_sale(
        db,
        user_id=ctx.user_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
        proof_type=payload.proof_type,
        proof_file=payload.proof_file,
    )
    return _sale_out(sale)


@router.get("", response_model=SaleListOut)
def read_sales(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    ctx: RequestContext = Depends(get_context),
    db: Session = Depends(get_db),
) -> SaleListOut:
    rows, total = list_sales(db, ctx.user_id, limit=limit, offset=offset)
    return SaleListOut(items=[_sale_out(s) for s in rows], total=total, limit=limit, offset=offset)

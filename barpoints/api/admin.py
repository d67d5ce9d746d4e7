from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from barpoints.core.context import RequestContext, require_admin
from barpoints.core.database import get_db
from barpoints.schemas.admin import (
    LedgerAdjustIn,
    PrizeAdminOut,
    PrizeCreate,
    PrizeUpdate,
    ProductCreate,
    ProductOut,
    ProductUpdate,
)
from barpoints.schemas.catalog import BarIn, BarOut, NamedIn, NamedOut
from barpoints.schemas.gamification import LedgerEntryOut
from barpoints.schemas.settings_schema import SettingsOut, SettingsUpdate
from barpoints.services import catalog
from barpoints.services.ledger import adjust_points
from barpoints.services.program import get_program_settings, update_program_settings

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/prizes", response_model=PrizeAdminOut, status_code=201)
def create_prize(
    payload: PrizeCreate,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> PrizeAdminOut:
    return PrizeAdminOut.model_validate(catalog.create_prize(db, **payload.model_dump()))


@router.put("/prizes/{prize_id}", response_model=PrizeAdminOut)
def update_prize(
    prize_id: int,
    payload: PrizeUpdate,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> PrizeAdminOut:
    prize = catalog.update_prize(db, prize_id, **payload.model_dump(exclude_unset=True))
    return PrizeAdminOut.model_validate(prize)


@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ProductOut:
    return ProductOut.model_validate(catalog.create_product(db, **payload.model_dump()))


@router.put("/products/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> ProductOut:
    product = catalog.update_product(db, product_id, **payload.model_dump(exclude_unset=True))
    return ProductOut.model_validate(product)


@router.post("/ledger/adjust", response_model=LedgerEntryOut, status_code=201)
def adjust_ledger(
    payload: LedgerAdjustIn,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> LedgerEntryOut:
    entry = adjust_points(db, payload.user_id, payload.type, payload.amount, payload.description)
    return LedgerEntryOut.model_validate(entry)


@router.get("/settings", response_model=SettingsOut)
def read_settings(ctx: RequestContext = Depends(require_admin), db: Session = Depends(get_db)) -> SettingsOut:
    return SettingsOut.model_validate(get_program_settings(db))


@router.put("/settings", response_model=SettingsOut)
def update_settings(
    payload: SettingsUpdate,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SettingsOut:
    row = update_program_settings(db, **payload.model_dump(exclude_unset=True))
    return SettingsOut.model_validate(row)


# -------------------------
# Справочники
# -------------------------

@router.get("/brands", response_model=list[NamedOut])
def read_brands(ctx: RequestContext = Depends(require_admin), db: Session = Depends(get_db)) -> list[NamedOut]:
    return [NamedOut.model_validate(b) for b in catalog.list_brands(db)]


@router.post("/brands", response_model=NamedOut, status_code=201)
def create_brand(
    payload: NamedIn,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> NamedOut:
    return NamedOut.model_validate(catalog.create_brand(db, payload.name))


@router.put("/brands/{brand_id}", response_model=NamedOut)
def update_brand(
    brand_id: int,
    payload: NamedIn,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> NamedOut:
    return NamedOut.model_validate(catalog.update_brand(db, brand_id, payload.name))


@router.get("/categories", response_model=list[NamedOut])
def read_categories(ctx: RequestContext = Depends(require_admin), db: Session = Depends(get_db)) -> list[NamedOut]:
    return [NamedOut.model_validate(c) for c in catalog.list_categories(db)]


@router.post("/categories", response_model=NamedOut, status_code=201)
def create_category(
    payload: NamedIn,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> NamedOut:
    return NamedOut.model_validate(catalog.create_category(db, payload.name))


@router.put("/categories/{category_id}", response_model=NamedOut)
def update_category(
    category_id: int,
    payload: NamedIn,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> NamedOut:
    return NamedOut.model_validate(catalog.update_category(db, category_id, payload.name))


@router.get("/cities", response_model=list[NamedOut])
def read_cities(ctx: RequestContext = Depends(require_admin), db: Session = Depends(get_db)) -> list[NamedOut]:
    return [NamedOut.model_validate(c) for c in catalog.list_cities(db)]


@router.post("/cities", response_model=NamedOut, status_code=201)
def create_city(
    payload: NamedIn,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> NamedOut:
    return NamedOut.model_validate(catalog.create_city(db, payload.name))


@router.get("/bars", response_model=list[BarOut])
def read_bars(ctx: RequestContext = Depends(require_admin), db: Session = Depends(get_db)) -> list[BarOut]:
    return [BarOut.model_validate(b) for b in catalog.list_bars(db)]


@router.post("/bars", response_model=BarOut, status_code=201)
def create_bar(
    payload: BarIn,
    ctx: RequestContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> BarOut:
    return BarOut.model_validate(catalog.create_bar(db, payload.city_id, payload.name, payload.address))

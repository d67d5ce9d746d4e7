from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from barpoints.core.database import get_db
from barpoints.schemas.catalog import BarOut, NamedOut, ProductPublicOut
from barpoints.services import catalog

# публичные справочники: нужны ещё до входа (регистрация) и для формы продажи
router = APIRouter(prefix="/data", tags=["data"])


@router.get("/cities", response_model=list[NamedOut])
def read_cities(db: Session = Depends(get_db)) -> list[NamedOut]:
    return [NamedOut.model_validate(c) for c in catalog.list_cities(db)]


@router.get("/bars", response_model=list[BarOut])
def read_bars(city_id: Optional[int] = Query(None), db: Session = Depends(get_db)) -> list[BarOut]:
    return [BarOut.model_validate(b) for b in catalog.list_bars(db, city_id=city_id)]


@router.get("/products", response_model=list[ProductPublicOut])
def read_products(db: Session = Depends(get_db)) -> list[ProductPublicOut]:
    return [ProductPublicOut.model_validate(p) for p in catalog.list_products(db)]

# backend/routes/products.py
import logging
from typing import Optional, List

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.product import ProductBatchCreate, ProductBatchResult, ProductCreate, ProductOut
from schemas.unit import UnitLocation, UnitOut
from services.errors import InventoryError, ProductNotFoundError
from services.identity import IdentityResolver
from services.product_catalog import ProductCatalog
from services.unit_registry import UnitRegistry
from utils.audit import write_log
from utils.tokenJWT import role_required, STOCK_ROLES

router = APIRouter(prefix="/products", tags=["Products"])
logger = logging.getLogger(__name__)

stock_user = role_required(*STOCK_ROLES)


def _get_product_or_404(db: Session, product_id: int):
    product = IdentityResolver(db).get_product(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


# =========================
# PRODUCT CREATION
# =========================
@router.post("", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(stock_user),
):
    product = ProductCatalog(db).create_product(payload)
    write_log(
        db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products", status="SUCCESS",
        ip=request.client.host if request.client else None, meta={"id": product.id},
    )
    return ProductOut.model_validate(product)


@router.post("/batch", response_model=ProductBatchResult, status_code=201)
def create_product_batch(
    payload: ProductBatchCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(stock_user),
):
    ip = request.client.host if request.client else None
    try:
        products = ProductCatalog(db).create_batch(payload)
    except InventoryError as exc:
        write_log(
            db, user_id=current_user.id, action="PRODUCT_BATCH_CREATE", resource="products",
            status="FAIL", ip=ip, meta={"error": exc.code},
        )
        raise

    result = ProductBatchResult(product_ids=[p.id for p in products], names=[p.name for p in products])
    write_log(
        db, user_id=current_user.id, action="PRODUCT_BATCH_CREATE", resource="products", status="SUCCESS",
        ip=ip, meta={"count": len(result.product_ids), "ids": result.product_ids},
    )
    return result


# =========================
# SINGLE PRODUCT + UNITS
# =========================
@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(stock_user),
):
    return ProductOut.model_validate(_get_product_or_404(db, product_id))


@router.get("/{product_id}/units", response_model=List[UnitOut])
def list_product_units(
    product_id: int,
    warehouse_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(stock_user),
):
    _get_product_or_404(db, product_id)
    units = UnitRegistry(db).list_active_units(product_id, warehouse_id=warehouse_id)
    return [UnitOut.model_validate(u) for u in units]


@router.get("/{product_id}/units/locations", response_model=List[UnitLocation])
def get_unit_location_summary(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(stock_user),
):
    _get_product_or_404(db, product_id)
    return UnitRegistry(db).location_summary(product_id)

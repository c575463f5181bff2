# backend/routes/movements.py
import logging
from datetime import datetime
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from config import settings
from database import get_db
from models.movement import Movement, MovementType
from models.product import Product
from models.unit import Unit
from models.users import User
from schemas.movement import MovementCreate, MovementCreated, MovementOut, MovementPage, MovementTypeOut
from services.errors import InventoryError
from services.identity import IdentityResolver
from services.movement_ledger import MovementLedger
from services.movement_validator import MovementValidator
from utils.audit import write_log
from utils.tokenJWT import role_required, STOCK_ROLES

router = APIRouter(prefix="/movements", tags=["Movements"])
logger = logging.getLogger(__name__)

stock_user = role_required(*STOCK_ROLES)


# Parse ISO datetime string with validation
def _parse_iso(s: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    if not s:
        return None
    # A bare date as upper bound covers the whole day
    if end_of_day and len(s) == 10:
        s += " 23:59:59"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Bad datetime format: {s}")


def _movement_to_out(m: Movement) -> MovementOut:
    return MovementOut(
        id=m.id,
        created_at=m.created_at,
        kind=m.movement_type.kind,
        movement_type_name=m.movement_type.name,
        product_id=m.product_id,
        product_name=m.product.name if m.product else "Unknown product",
        quantity=m.quantity,
        unit_cost=m.unit_cost,
        list_price=m.list_price,
        warehouse_id=m.warehouse_id,
        warehouse_name=m.warehouse.name if m.warehouse else None,
        supplier_id=m.supplier_id,
        supplier_name=m.supplier.name if m.supplier else None,
        created_by_id=m.created_by_id,
        created_by_email=m.created_by.email if m.created_by else None,
        comment=m.comment,
        unit_codes=sorted(u.code for u in m.units),
    )


@router.post("", response_model=MovementCreated, status_code=201)
def create_movement(
    payload: MovementCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(stock_user),
):
    ip = request.client.host if request.client else None
    try:
        command = MovementValidator(IdentityResolver(db)).validate(payload)
        entry = MovementLedger(db).record(command, created_by_id=current_user.id)
    except InventoryError as exc:
        write_log(
            db, user_id=current_user.id, action="MOVEMENT_CREATE", resource="movements",
            status="FAIL", ip=ip, meta={"error": exc.code, "movement_type_id": payload.movement_type_id},
        )
        raise

    result = MovementCreated(
        movement_id=entry.movement.id,
        product_id=entry.product.id,
        kind=command.kind,
        quantity=command.quantity,
        resulting_quantity=entry.resulting_quantity,
        unit_ids=[u.id for u in entry.units],
    )
    write_log(
        db, user_id=current_user.id, action="MOVEMENT_CREATE", resource="movements", status="SUCCESS", ip=ip,
        meta={"id": result.movement_id, "product_id": result.product_id, "kind": command.kind.value,
              "quantity": command.quantity, "units": len(result.unit_ids)},
    )
    return result


@router.get("/types", response_model=List[MovementTypeOut])
def list_movement_types(
    db: Session = Depends(get_db),
    current_user: User = Depends(stock_user),
):
    types = db.query(MovementType).order_by(MovementType.name.asc()).all()
    return [MovementTypeOut.model_validate(t) for t in types]


@router.get("", response_model=MovementPage)
def list_movements(
    q: Optional[str] = Query(None, description="Unit code or product name"),
    movement_type_id: Optional[int] = Query(None),
    warehouse_id: Optional[int] = Query(None),
    supplier_id: Optional[int] = Query(None),
    user_id: Optional[int] = Query(None),
    date_from: Optional[str] = Query(None, description="ISO datetime from"),
    date_to: Optional[str] = Query(None, description="ISO datetime to"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(stock_user),
):
    fdt = _parse_iso(date_from)
    tdt = _parse_iso(date_to, end_of_day=True)

    query = db.query(Movement).filter(Movement.active.is_(True))

    if q:
        like = f"%{q.strip()}%"
        query = query.join(Product, Product.id == Movement.product_id).filter(
            or_(Product.name.ilike(like), Movement.units.any(Unit.code.ilike(like)))
        )
    if movement_type_id is not None:
        query = query.filter(Movement.movement_type_id == movement_type_id)
    if warehouse_id is not None:
        query = query.filter(Movement.warehouse_id == warehouse_id)
    if supplier_id is not None:
        query = query.filter(Movement.supplier_id == supplier_id)
    if user_id is not None:
        query = query.filter(Movement.created_by_id == user_id)
    if fdt:
        query = query.filter(Movement.created_at >= fdt)
    if tdt:
        query = query.filter(Movement.created_at <= tdt)

    total = query.count()
    items = (
        query.options(
            joinedload(Movement.movement_type),
            joinedload(Movement.product),
            joinedload(Movement.warehouse),
            joinedload(Movement.supplier),
            joinedload(Movement.created_by),
            selectinload(Movement.units),
        )
        .order_by(Movement.created_at.desc(), Movement.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {"items": [_movement_to_out(m) for m in items], "total": total, "page": page, "page_size": page_size}

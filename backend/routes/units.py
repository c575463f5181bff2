# backend/routes/units.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.unit import UnitTimeline, UnitTimelineEvent
from services.errors import UnitIdNotFoundError
from services.unit_registry import UnitRegistry
from utils.tokenJWT import role_required, STOCK_ROLES

router = APIRouter(prefix="/units", tags=["Units"])

stock_user = role_required(*STOCK_ROLES)


# Undated movements sort last; ties fall back to id
def newest_first(movements):
    return sorted(movements, key=lambda m: (m.created_at is not None, m.created_at, m.id), reverse=True)


# History of one unit: every movement that created, moved or shipped it
@router.get("/{unit_id}/timeline", response_model=UnitTimeline)
def get_unit_timeline(
    unit_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(stock_user),
):
    unit = UnitRegistry(db).timeline(unit_id)
    if not unit:
        raise UnitIdNotFoundError(unit_id)

    movements = newest_first(unit.movements)
    events = [
        UnitTimelineEvent(
            movement_id=m.id,
            created_at=m.created_at,
            movement_type_name=m.movement_type.name if m.movement_type else "Movement",
            is_incoming=bool(m.movement_type and m.movement_type.is_incoming),
            quantity=m.quantity,
            warehouse_name=m.warehouse.name if m.warehouse else None,
            user=(m.created_by.name or m.created_by.email) if m.created_by else None,
            comment=m.comment,
        )
        for m in movements
    ]
    return UnitTimeline(
        unit_id=unit.id,
        code=unit.code,
        product_id=unit.product_id,
        product_name=unit.product.name if unit.product else None,
        events=events,
    )

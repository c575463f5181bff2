# backend/services/unit_registry.py
"""
Unit registry: the serialized (IMEI tracked) units of each product.

All methods only stage changes on the session; committing is the caller's
job (the movement ledger runs them inside its transaction).
"""
import uuid
import logging
from typing import Callable, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from config import settings
from models.catalog import Warehouse
from models.movement import Movement
from models.unit import Unit
from services.errors import (
    MixedProductUnitsError, UnitAlreadyActiveError, UnitNotFoundError, UnitsNotFoundError,
)

logger = logging.getLogger(__name__)


def generate_unit_code(prefix: Optional[str] = None) -> str:
    """Synthetic code for a unit received without an IMEI."""
    prefix = settings.UNIT_CODE_PREFIX if prefix is None else prefix
    return f"{prefix}{uuid.uuid4().hex[:12].upper()}"


class UnitRegistry:
    def __init__(self, db: Session, code_generator: Callable[[], str] = generate_unit_code):
        self.db = db
        self.code_generator = code_generator

    # ---- lookups ----

    def _active_units(self, codes: Sequence[str], product_id: Optional[int] = None) -> List[Unit]:
        if not codes:
            return []
        query = self.db.query(Unit).filter(Unit.code.in_(list(codes)), Unit.active.is_(True))
        if product_id is not None:
            query = query.filter(Unit.product_id == product_id)
        return query.order_by(Unit.id).all()

    def resolve_product_by_unit_code(self, code: str) -> int:
        unit = (
            self.db.query(Unit)
            .filter(Unit.code == code, Unit.active.is_(True))
            .first()
        )
        if unit is None:
            raise UnitNotFoundError(code)
        return unit.product_id

    def list_active_units(self, product_id: int, warehouse_id: Optional[int] = None) -> List[Unit]:
        query = self.db.query(Unit).filter(Unit.product_id == product_id, Unit.active.is_(True))
        if warehouse_id is not None:
            query = query.filter(Unit.warehouse_id == warehouse_id)
        return query.order_by(Unit.code.asc()).all()

    def count_active_units(self, product_id: int) -> int:
        return (
            self.db.query(func.count(Unit.id))
            .filter(Unit.product_id == product_id, Unit.active.is_(True))
            .scalar()
        )

    def location_summary(self, product_id: int) -> List[dict]:
        rows = (
            self.db.query(Unit.warehouse_id, Warehouse.name, func.count(Unit.id))
            .outerjoin(Warehouse, Warehouse.id == Unit.warehouse_id)
            .filter(Unit.product_id == product_id, Unit.active.is_(True))
            .group_by(Unit.warehouse_id, Warehouse.name)
            .order_by(Unit.warehouse_id)
            .all()
        )
        return [
            {"warehouse_id": wid, "warehouse_name": wname, "active_unit_count": count}
            for wid, wname, count in rows
        ]

    def timeline(self, unit_id: int) -> Optional[Unit]:
        """Unit with its movements loaded, or None."""
        return (
            self.db.query(Unit)
            .options(
                joinedload(Unit.product),
                joinedload(Unit.movements).joinedload(Movement.movement_type),
                joinedload(Unit.movements).joinedload(Movement.warehouse),
                joinedload(Unit.movements).joinedload(Movement.created_by),
            )
            .filter(Unit.id == unit_id)
            .first()
        )

    # ---- mutations ----

    def create_units(
        self,
        product_id: int,
        count: int,
        codes: Sequence[str] = (),
        name: Optional[str] = None,
        warehouse_id: Optional[int] = None,
    ) -> List[Unit]:
        """Create exactly `count` units, using `codes` first and generated codes for the rest."""
        codes = list(codes)
        taken = self._active_units(codes)
        if taken:
            raise UnitAlreadyActiveError(u.code for u in taken)

        all_codes = codes + [self.code_generator() for _ in range(count - len(codes))]
        units = [
            Unit(code=code, product_id=product_id, warehouse_id=warehouse_id, name=name, active=True)
            for code in all_codes
        ]
        self.db.add_all(units)
        self.db.flush()
        logger.debug("Created %d units for product %s (%d generated)",
                     len(units), product_id, count - len(codes))
        return units

    def retire_units(self, product_id: int, codes: Sequence[str]) -> List[Unit]:
        """Deactivate the active units of `product_id` holding `codes`; all or nothing."""
        units = self._active_units(codes, product_id=product_id)
        if len(units) != len(codes):
            raise UnitsNotFoundError(codes, [u.code for u in units], product_id=product_id)
        for unit in units:
            unit.active = False
        self.db.flush()
        return units

    def retire_oldest_units(self, product_id: int, count: int) -> List[Unit]:
        """Deactivate up to `count` of the product's oldest active units."""
        if count <= 0:
            return []
        units = (
            self.db.query(Unit)
            .filter(Unit.product_id == product_id, Unit.active.is_(True))
            .order_by(Unit.created_at.asc(), Unit.id.asc())
            .limit(count)
            .all()
        )
        for unit in units:
            unit.active = False
        self.db.flush()
        return units

    def relocate_units(self, codes: Sequence[str], warehouse_id: int, product_id: Optional[int] = None) -> List[Unit]:
        """Move active units to `warehouse_id`. Every code must resolve, all to one product."""
        units = self._active_units(codes, product_id=product_id)
        if len(units) != len(codes):
            raise UnitsNotFoundError(codes, [u.code for u in units], product_id=product_id)
        product_ids = {u.product_id for u in units}
        if len(product_ids) > 1:
            raise MixedProductUnitsError(product_ids)
        for unit in units:
            unit.warehouse_id = warehouse_id
        self.db.flush()
        return units

# backend/services/movement_ledger.py
"""
Movement ledger: the only writer of product quantity.

`MovementLedger.record` applies one validated command as a single
transaction:

    1. transfers without a product resolve it from their first unit code
    2. lock the product row
    3. create / retire / relocate units according to the movement kind
    4. insert the movement linked to those units
    5. store the new product quantity (receipts and shipments only)

Any error in those steps rolls everything back, so a movement is either
fully applied or not applied at all.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from database import TransactionOptions, transaction
from models.movement import Movement, MovementKind
from models.product import Product
from models.unit import Unit
from services.errors import (
    InventoryError, MixedProductUnitsError, NegativeResultingQuantityError, ProductNotFoundError,
)
from services.movement_validator import MovementCommand
from services.unit_registry import UnitRegistry

logger = logging.getLogger(__name__)


@dataclass
class LedgerEntry:
    movement: Movement
    product: Product
    resulting_quantity: int
    units: List[Unit] = field(default_factory=list)


class MovementLedger:
    def __init__(
        self,
        db: Session,
        registry: Optional[UnitRegistry] = None,
        options: Optional[TransactionOptions] = None,
    ):
        self.db = db
        self.registry = registry or UnitRegistry(db)
        self.options = options

    def _lock_product(self, product_id: int) -> Product:
        # Exclusive lease on the product row for the rest of the transaction
        product = (
            self.db.query(Product)
            .filter(Product.id == product_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def _insert_movement(
        self, command: MovementCommand, product: Product, units: List[Unit], created_by_id: Optional[int]
    ) -> Movement:
        movement = Movement(
            quantity=command.quantity,
            unit_cost=command.unit_cost,
            list_price=command.list_price,
            movement_type_id=command.movement_type_id,
            product_id=product.id,
            warehouse_id=command.warehouse_id,
            supplier_id=command.supplier_id,
            created_by_id=created_by_id,
            comment=command.comment,
            active=True,
        )
        movement.units = list(units)
        self.db.add(movement)
        self.db.flush()
        return movement

    def _apply_units(self, command: MovementCommand, product: Product) -> Tuple[List[Unit], int]:
        current = product.quantity or 0

        if command.kind is MovementKind.INCOMING:
            units = self.registry.create_units(
                product.id, command.quantity, command.unit_codes,
                name=product.name, warehouse_id=command.warehouse_id,
            )
            return units, current + command.quantity

        if command.kind is MovementKind.OUTGOING:
            units = self.registry.retire_units(product.id, command.unit_codes)
            resulting = current - command.quantity
            if resulting < 0:
                raise NegativeResultingQuantityError(product.id, current, command.quantity)
            # Quantity not covered by explicit codes ships the oldest units first
            units += self.registry.retire_oldest_units(product.id, command.quantity - len(units))
            return units, resulting

        units = self.registry.relocate_units(command.unit_codes, command.warehouse_id)
        if units and units[0].product_id != product.id:
            raise MixedProductUnitsError({product.id, units[0].product_id})
        return units, current

    def record(self, command: MovementCommand, created_by_id: Optional[int] = None) -> LedgerEntry:
        try:
            with transaction(self.db, self.options) as tx:
                product_id = command.product_id
                if command.kind is MovementKind.LATERAL and product_id is None:
                    product_id = self.registry.resolve_product_by_unit_code(command.unit_codes[0])

                product = self._lock_product(product_id)
                units, resulting = self._apply_units(command, product)
                movement = self._insert_movement(command, product, units, created_by_id)

                if command.kind is not MovementKind.LATERAL:
                    product.quantity = resulting
                    if command.kind is MovementKind.INCOMING and command.list_price is not None:
                        product.list_price = command.list_price

                tx.check_deadline()
        except InventoryError as exc:
            logger.warning("Movement rolled back (%s): %s", exc.code, exc.message)
            raise

        logger.info(
            "Movement %s committed: %s x%d product=%s quantity=%d units=%d",
            movement.id, command.kind.value, command.quantity, product.id, resulting, len(units),
        )
        return LedgerEntry(movement=movement, product=product, resulting_quantity=resulting, units=units)

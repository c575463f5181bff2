# backend/services/movement_validator.py
"""
Movement validation.

Turns a raw `MovementCreate` payload into a `MovementCommand`: the movement
kind is derived once from the movement type flags and every field-presence /
shape rule for that kind is enforced here, before the ledger touches storage.
The only I/O is read-only identity lookups.
"""
from collections import Counter
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Tuple

from models.movement import MovementKind, MovementType
from schemas.movement import MovementCreate
from services.identity import IdentityResolver
from services.errors import (
    DuplicateUnitIdentifierError, InvalidMovementTypeError, InvalidNumberError,
    MissingCostError, MissingProductError, MissingQuantityError,
    MissingUnitIdentifiersError, MissingWarehouseError, NegativeCostError,
    NegativeListPriceError, NonPositiveQuantityError, SupplierNotFoundError,
    TooManyUnitIdentifiersError, UnitIdentifierCountMismatchError, WarehouseNotFoundError,
)

TWOPLACES = Decimal("0.01")


@dataclass(frozen=True)
class MovementCommand:
    """A validated movement, ready for the ledger."""
    kind: MovementKind
    movement_type_id: int
    quantity: int
    unit_codes: Tuple[str, ...] = ()
    product_id: Optional[int] = None
    unit_cost: Optional[Decimal] = None
    list_price: Optional[Decimal] = None
    warehouse_id: Optional[int] = None
    supplier_id: Optional[int] = None
    comment: Optional[str] = None


def _parse_decimal(field: str, value: Optional[str]) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidNumberError(field, value)
    if not number.is_finite():
        raise InvalidNumberError(field, value)
    return number


def parse_quantity(value: Optional[str]) -> Optional[int]:
    number = _parse_decimal("quantity", value)
    if number is None:
        return None
    if number != number.to_integral_value():
        raise InvalidNumberError("quantity", value)
    return int(number)


def parse_amount(field: str, value: Optional[str]) -> Optional[Decimal]:
    number = _parse_decimal(field, value)
    if number is None:
        return None
    return number.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def classify(movement_type: Optional[MovementType], movement_type_id) -> MovementKind:
    if movement_type is None:
        raise InvalidMovementTypeError(movement_type_id)
    try:
        return movement_type.kind
    except ValueError as exc:
        raise InvalidMovementTypeError(movement_type_id, str(exc)) from exc


def build_command(payload: MovementCreate, kind: MovementKind) -> MovementCommand:
    """Apply the rules of `kind` to `payload`. Pure function."""
    codes = tuple(payload.unit_codes)
    repeated = [code for code, n in Counter(codes).items() if n > 1]
    if repeated:
        raise DuplicateUnitIdentifierError(repeated)

    if kind is MovementKind.LATERAL:
        # Transfers are driven by the unit identifiers themselves
        if not codes:
            raise MissingUnitIdentifiersError()
        if payload.warehouse_id is None:
            raise MissingWarehouseError()

        quantity = parse_quantity(payload.quantity)
        if quantity is None:
            quantity = len(codes)
        elif quantity <= 0:
            raise NonPositiveQuantityError(quantity)
        elif quantity != len(codes):
            # Every transferred unit is named by its code
            raise UnitIdentifierCountMismatchError(len(codes), quantity)

        unit_cost = parse_amount("unit_cost", payload.unit_cost)
        if unit_cost is not None and unit_cost < 0:
            raise NegativeCostError(unit_cost)
    else:
        if payload.product_id is None:
            raise MissingProductError()

        unit_cost = parse_amount("unit_cost", payload.unit_cost)
        if unit_cost is None:
            raise MissingCostError()
        if unit_cost < 0:
            raise NegativeCostError(unit_cost)

        quantity = parse_quantity(payload.quantity)
        if quantity is None:
            raise MissingQuantityError()
        if quantity <= 0:
            raise NonPositiveQuantityError(quantity)

        # Receipts generate codes for the remainder, shipments pick the oldest units
        if len(codes) > quantity:
            raise TooManyUnitIdentifiersError(len(codes), quantity)

    list_price = parse_amount("list_price", payload.list_price)
    if list_price is not None and list_price < 0:
        raise NegativeListPriceError(list_price)
    if kind is not MovementKind.INCOMING:
        # A list price only means something on receipts
        list_price = None

    return MovementCommand(
        kind=kind,
        movement_type_id=payload.movement_type_id,
        quantity=quantity,
        unit_codes=codes,
        product_id=payload.product_id,
        unit_cost=unit_cost,
        list_price=list_price,
        warehouse_id=payload.warehouse_id,
        supplier_id=payload.supplier_id,
        comment=payload.comment,
    )


class MovementValidator:
    def __init__(self, resolver: IdentityResolver):
        self.resolver = resolver

    def validate(self, payload: MovementCreate) -> MovementCommand:
        movement_type = self.resolver.get_movement_type(payload.movement_type_id)
        kind = classify(movement_type, payload.movement_type_id)
        command = build_command(payload, kind)

        if command.warehouse_id is not None and not self.resolver.warehouse_exists(command.warehouse_id):
            raise WarehouseNotFoundError(command.warehouse_id)
        if command.supplier_id is not None and not self.resolver.supplier_exists(command.supplier_id):
            raise SupplierNotFoundError(command.supplier_id)
        return command

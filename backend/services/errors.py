# backend/services/errors.py
"""
Typed errors raised by the inventory services.

Three families, matching how the caller should react:

    InventoryError
    +-- MovementValidationError   bad input, detected before any write (400)
    +-- ConsistencyError          state does not allow the operation; the
    |                             transaction is rolled back (404 / 409)
    +-- InfrastructureError       timeouts, write conflicts, persistence
                                  failures; nothing was applied (409 / 503 / 504)

Each error carries a stable `code` for API clients and a `details` dict
with the structured data behind the message.
"""
from typing import Any, Dict, Iterable, Optional


class InventoryError(Exception):
    """Base class for every error raised by the inventory services"""

    status_code = 500
    code = "INVENTORY_ERROR"

    def __init__(self, message: str, **details: Any):
        self.message = message
        self.details: Dict[str, Any] = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


# ---- VALIDATION ----

class MovementValidationError(InventoryError):
    status_code = 400
    code = "VALIDATION_ERROR"


class MissingProductError(MovementValidationError):
    code = "MISSING_PRODUCT"

    def __init__(self):
        super().__init__("A product is required for incoming and outgoing movements")


class MissingCostError(MovementValidationError):
    code = "MISSING_COST"

    def __init__(self):
        super().__init__("Unit cost is required for incoming and outgoing movements")


class NegativeCostError(MovementValidationError):
    code = "NEGATIVE_COST"

    def __init__(self, cost):
        super().__init__("Unit cost cannot be negative", cost=str(cost))


class MissingQuantityError(MovementValidationError):
    code = "MISSING_QUANTITY"

    def __init__(self):
        super().__init__("Quantity is required for incoming and outgoing movements")


class NonPositiveQuantityError(MovementValidationError):
    code = "NON_POSITIVE_QUANTITY"

    def __init__(self, quantity: int):
        super().__init__("Quantity must be greater than zero", quantity=quantity)


class MissingUnitIdentifiersError(MovementValidationError):
    code = "MISSING_UNIT_IDENTIFIERS"

    def __init__(self):
        super().__init__("Transfers require at least one unit identifier")


class MissingWarehouseError(MovementValidationError):
    code = "MISSING_WAREHOUSE"

    def __init__(self):
        super().__init__("Transfers require a destination warehouse")


class TooManyUnitIdentifiersError(MovementValidationError):
    code = "TOO_MANY_UNIT_IDENTIFIERS"

    def __init__(self, supplied: int, quantity: int):
        super().__init__(
            f"{supplied} unit identifiers supplied for a quantity of {quantity}",
            supplied=supplied, quantity=quantity,
        )


class UnitIdentifierCountMismatchError(MovementValidationError):
    code = "UNIT_IDENTIFIER_COUNT_MISMATCH"

    def __init__(self, supplied: int, quantity: int):
        super().__init__(
            f"Transfer quantity {quantity} does not match the {supplied} unit identifiers supplied",
            supplied=supplied, quantity=quantity,
        )


class NegativeListPriceError(MovementValidationError):
    code = "NEGATIVE_LIST_PRICE"

    def __init__(self, list_price):
        super().__init__("List price cannot be negative", list_price=str(list_price))


class InvalidNumberError(MovementValidationError):
    code = "INVALID_NUMBER"

    def __init__(self, field: str, value: Any):
        super().__init__(f"'{value}' is not a valid number for {field}", field=field, value=str(value))


class DuplicateUnitIdentifierError(MovementValidationError):
    code = "DUPLICATE_UNIT_IDENTIFIER"

    def __init__(self, codes: Iterable[str]):
        codes = sorted(set(codes))
        super().__init__("Unit identifiers repeated in the request: " + ", ".join(codes), codes=codes)


class CatalogReferenceNotFoundError(MovementValidationError):
    code = "CATALOG_REFERENCE_NOT_FOUND"

    def __init__(self, field: str, value: Any):
        super().__init__(f"{field}={value} does not exist", field=field, value=value)


# ---- CONSISTENCY ----

class ConsistencyError(InventoryError):
    status_code = 409
    code = "CONSISTENCY_ERROR"


class InvalidMovementTypeError(ConsistencyError):
    status_code = 404
    code = "INVALID_MOVEMENT_TYPE"

    def __init__(self, movement_type_id: Any, reason: str = "not found"):
        super().__init__(f"Movement type {movement_type_id} is invalid: {reason}",
                         movement_type_id=movement_type_id)


class ProductNotFoundError(ConsistencyError):
    status_code = 404
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: Any):
        super().__init__(f"Product {product_id} not found", product_id=product_id)


class UnitNotFoundError(ConsistencyError):
    status_code = 404
    code = "UNIT_NOT_FOUND"

    def __init__(self, unit_code: str):
        super().__init__(f"No active unit with identifier {unit_code}", unit_code=unit_code)


class UnitIdNotFoundError(ConsistencyError):
    status_code = 404
    code = "UNIT_NOT_FOUND"

    def __init__(self, unit_id: Any):
        super().__init__(f"Unit {unit_id} not found", unit_id=unit_id)


class UnitsNotFoundError(ConsistencyError):
    code = "UNITS_NOT_FOUND"

    def __init__(self, requested: Iterable[str], found: Iterable[str], product_id: Optional[int] = None):
        requested, found = list(requested), list(found)
        missing = sorted(set(requested) - set(found))
        super().__init__(
            "Some unit identifiers are not registered or not active: " + ", ".join(missing),
            product_id=product_id, requested=len(requested), found=len(found), missing=missing,
        )


class UnitAlreadyActiveError(ConsistencyError):
    code = "UNIT_ALREADY_ACTIVE"

    def __init__(self, codes: Iterable[str]):
        codes = sorted(set(codes))
        super().__init__("Unit identifiers already held by active units: " + ", ".join(codes), codes=codes)


class MixedProductUnitsError(ConsistencyError):
    code = "MIXED_PRODUCT_UNITS"

    def __init__(self, product_ids: Iterable[int]):
        product_ids = sorted(set(product_ids))
        super().__init__("All unit identifiers must belong to the same product", product_ids=product_ids)


class NegativeResultingQuantityError(ConsistencyError):
    code = "NEGATIVE_RESULTING_QUANTITY"

    def __init__(self, product_id: int, current: int, requested: int):
        super().__init__(
            f"Product {product_id} has {current} units, cannot ship {requested}",
            product_id=product_id, current=current, requested=requested,
        )


class WarehouseNotFoundError(ConsistencyError):
    status_code = 404
    code = "WAREHOUSE_NOT_FOUND"

    def __init__(self, warehouse_id: Any):
        super().__init__(f"Warehouse {warehouse_id} not found", warehouse_id=warehouse_id)


class SupplierNotFoundError(ConsistencyError):
    status_code = 404
    code = "SUPPLIER_NOT_FOUND"

    def __init__(self, supplier_id: Any):
        super().__init__(f"Supplier {supplier_id} not found", supplier_id=supplier_id)


# ---- INFRASTRUCTURE ----

class InfrastructureError(InventoryError):
    status_code = 503
    code = "INFRASTRUCTURE_ERROR"


class TransactionTimeoutError(InfrastructureError):
    status_code = 504
    code = "TRANSACTION_TIMEOUT"

    def __init__(self, timeout: float, elapsed: float):
        super().__init__(
            f"Transaction exceeded its {timeout:.1f}s bound and was rolled back",
            timeout=timeout, elapsed=round(elapsed, 3),
        )


class ConcurrencyConflictError(InfrastructureError):
    status_code = 409
    code = "CONCURRENCY_CONFLICT"

    def __init__(self, reason: str = ""):
        super().__init__("The product was modified concurrently, retry the operation", reason=reason)


class BatchCreationError(InfrastructureError):
    code = "BATCH_CREATION_FAILED"

    def __init__(self, index: int, reason: str):
        super().__init__(f"Variant #{index + 1} could not be created, no product was saved",
                         index=index, reason=reason)

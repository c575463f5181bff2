# backend/services/identity.py
"""Read-only lookups over master data used to validate and name records."""
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from models.catalog import (
    Brand, DeviceModel, StorageOption, RamOption, Color, ProductType, Warehouse, Supplier
)
from models.movement import MovementType
from models.product import Product

# Product relations the naming composer needs
PRODUCT_NAMING_RELATIONS = (
    joinedload(Product.brand),
    joinedload(Product.model),
    joinedload(Product.storage),
    joinedload(Product.ram),
    joinedload(Product.color),
)

# Catalog references a product may carry, keyed by the payload field name
CATALOG_MODELS = {
    "brand_id": Brand,
    "model_id": DeviceModel,
    "storage_id": StorageOption,
    "ram_id": RamOption,
    "color_id": Color,
    "product_type_id": ProductType,
}


class IdentityResolver:
    def __init__(self, db: Session):
        self.db = db

    def get_movement_type(self, movement_type_id: int) -> Optional[MovementType]:
        return self.db.query(MovementType).filter(MovementType.id == movement_type_id).first()

    def get_product(self, product_id: int) -> Optional[Product]:
        return (
            self.db.query(Product)
            .options(*PRODUCT_NAMING_RELATIONS)
            .filter(Product.id == product_id)
            .first()
        )

    def warehouse_exists(self, warehouse_id: int) -> bool:
        return self.db.query(Warehouse.id).filter(Warehouse.id == warehouse_id).first() is not None

    def supplier_exists(self, supplier_id: int) -> bool:
        return self.db.query(Supplier.id).filter(Supplier.id == supplier_id).first() is not None

    def catalog_reference_exists(self, field: str, value: int) -> bool:
        model = CATALOG_MODELS[field]
        return self.db.query(model.id).filter(model.id == value).first() is not None

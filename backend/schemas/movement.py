# backend/schemas/movement.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from models.movement import MovementKind


# Raw movement request as sent by the back-office form.
# Numbers arrive as text and are parsed by the movement validator,
# so that each missing / malformed field maps to its own typed error.
class MovementCreate(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    movement_type_id: int
    product_id: Optional[int] = None
    quantity: Optional[str] = None
    unit_cost: Optional[str] = None
    list_price: Optional[str] = None
    unit_codes: List[str] = Field(default_factory=list, description="IMEIs or other unit identifiers")
    warehouse_id: Optional[int] = None
    supplier_id: Optional[int] = None
    comment: Optional[str] = None

    @field_validator("product_id", "warehouse_id", "supplier_id", mode="before")
    @classmethod
    def _blank_reference(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("quantity", "unit_cost", "list_price", "comment", mode="before")
    @classmethod
    def _blank_text(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # Accepts a list or the comma / newline separated text of the IMEI textarea
    @field_validator("unit_codes", mode="before")
    @classmethod
    def _split_codes(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.replace("\n", ",").split(",")
        return [str(code).strip() for code in v if str(code).strip()]


# Result of a committed movement
class MovementCreated(BaseModel):
    movement_id: int
    product_id: int
    kind: MovementKind
    quantity: int
    resulting_quantity: int
    unit_ids: List[int]


class MovementTypeOut(BaseModel):
    id: int
    name: str
    is_incoming: bool
    is_outgoing: bool
    kind: MovementKind

    model_config = ConfigDict(from_attributes=True)


# Row of the ledger listing
class MovementOut(BaseModel):
    id: int
    created_at: Optional[datetime] = None
    kind: MovementKind
    movement_type_name: str
    product_id: int
    product_name: str
    quantity: int
    unit_cost: Optional[Decimal] = None
    list_price: Optional[Decimal] = None
    warehouse_id: Optional[int] = None
    warehouse_name: Optional[str] = None
    supplier_id: Optional[int] = None
    supplier_name: Optional[str] = None
    created_by_id: Optional[int] = None
    created_by_email: Optional[str] = None
    comment: Optional[str] = None
    unit_codes: List[str] = []


# Paginated response for the movement ledger
class MovementPage(BaseModel):
    items: List[MovementOut]
    total: int
    page: int
    page_size: int

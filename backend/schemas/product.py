# backend/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from decimal import Decimal
from typing import Optional, List


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Attributes shared by every product created from one form submission
class ProductBase(ORMBase):
    brand_id: Optional[int] = None
    model_id: Optional[int] = None
    product_type_id: Optional[int] = None
    description: Optional[str] = None
    cost: Optional[Decimal] = Field(default=None, ge=0)
    list_price: Optional[Decimal] = Field(default=None, ge=0)


# Schema for creating a single product
class ProductCreate(ProductBase):
    storage_id: Optional[int] = None
    ram_id: Optional[int] = None
    color_id: Optional[int] = None


# Schema for combinatorial creation: one product per storage x ram x color choice
class ProductBatchCreate(ProductBase):
    storage_ids: List[int] = Field(default_factory=list)
    ram_ids: List[int] = Field(default_factory=list)
    color_ids: List[int] = Field(default_factory=list)


class ProductOut(ProductBase):
    id: int
    name: str
    quantity: int
    storage_id: Optional[int] = None
    ram_id: Optional[int] = None
    color_id: Optional[int] = None
    active: bool
    created_at: Optional[datetime] = None


class ProductBatchResult(BaseModel):
    product_ids: List[int]
    names: List[str]

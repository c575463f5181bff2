# backend/schemas/unit.py
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import List, Optional


class UnitOut(BaseModel):
    id: int
    code: str
    product_id: int
    warehouse_id: Optional[int] = None
    name: Optional[str] = None
    active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Active units of one product grouped by their current warehouse
class UnitLocation(BaseModel):
    warehouse_id: Optional[int] = None
    warehouse_name: Optional[str] = None
    active_unit_count: int


class UnitTimelineEvent(BaseModel):
    movement_id: int
    created_at: Optional[datetime] = None
    movement_type_name: str
    is_incoming: bool
    quantity: int
    warehouse_name: Optional[str] = None
    user: Optional[str] = None
    comment: Optional[str] = None


class UnitTimeline(BaseModel):
    unit_id: int
    code: str
    product_id: int
    product_name: Optional[str] = None
    events: List[UnitTimelineEvent]

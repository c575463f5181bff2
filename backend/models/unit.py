# backend/models/unit.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Index, text, func
from sqlalchemy.orm import relationship
from database import Base
from models.movement import movement_units

# One serialized physical item (IMEI or generated code) of a product.
# Created by incoming movements, deactivated by outgoing ones,
# relocated by transfers. Rows are never deleted.
class Unit(Base):
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=True, index=True)

    # Product display name at creation time, not kept in sync
    name = Column(String, nullable=True)

    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="units")
    warehouse = relationship("Warehouse")
    movements = relationship("Movement", secondary=movement_units, back_populates="units")

    __table_args__ = (
        # A code may be held by a single active unit; retired units keep theirs
        Index(
            "uq_units_active_code", "code", unique=True,
            postgresql_where=text("active"),
            sqlite_where=text("active = 1"),
        ),
    )

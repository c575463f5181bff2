# backend/models/movement.py
import enum
from sqlalchemy import (
    Column, Integer, String, Boolean, Numeric, ForeignKey, DateTime, Table, CheckConstraint, func
)
from sqlalchemy.orm import relationship
from database import Base


# Classification of a movement type, derived once from its two flags
class MovementKind(str, enum.Enum):
    INCOMING = "INCOMING"   # receipt: creates units, raises quantity
    OUTGOING = "OUTGOING"   # shipment: retires units, lowers quantity
    LATERAL = "LATERAL"     # transfer between warehouses, quantity unchanged

    @classmethod
    def from_flags(cls, is_incoming: bool, is_outgoing: bool) -> "MovementKind":
        if is_incoming and is_outgoing:
            raise ValueError("a movement type cannot be both incoming and outgoing")
        if is_incoming:
            return cls.INCOMING
        if is_outgoing:
            return cls.OUTGOING
        return cls.LATERAL


class MovementType(Base):
    __tablename__ = "movement_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    is_incoming = Column(Boolean, nullable=False, default=False)
    is_outgoing = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("NOT (is_incoming AND is_outgoing)", name="ck_movement_types_direction"),
    )

    @property
    def kind(self) -> MovementKind:
        return MovementKind.from_flags(bool(self.is_incoming), bool(self.is_outgoing))


# Units touched by a movement (created, retired or relocated)
movement_units = Table(
    "movement_units",
    Base.metadata,
    Column("movement_id", Integer, ForeignKey("movements.id"), primary_key=True),
    Column("unit_id", Integer, ForeignKey("units.id"), primary_key=True),
)


# Append-only ledger entry. Quantity is stored positive, its sign comes from the type.
class Movement(Base):
    __tablename__ = "movements"

    id = Column(Integer, primary_key=True, index=True)
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)
    unit_cost = Column(Numeric(12, 2), nullable=True)
    list_price = Column(Numeric(12, 2), nullable=True) # price override carried by receipts

    movement_type_id = Column(Integer, ForeignKey("movement_types.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=True, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    comment = Column(String, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    movement_type = relationship("MovementType")
    product = relationship("Product")
    warehouse = relationship("Warehouse")
    supplier = relationship("Supplier")
    created_by = relationship("User")
    units = relationship("Unit", secondary=movement_units, back_populates="movements")

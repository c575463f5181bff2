# backend/models/product.py
from sqlalchemy import Column, Integer, String, Boolean, Numeric, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Model Product
# One sellable article (e.g. "Samsung A15 128GB 4GB Black").
# `quantity` is the aggregate stock; the movement ledger is its only writer.
# Every catalog dimension is optional so accessories can omit what they lack.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)

    # Prices are nullable: a product may be registered before it is priced.
    cost = Column(Numeric(12, 2), CheckConstraint("cost >= 0"), nullable=True)
    list_price = Column(Numeric(12, 2), CheckConstraint("list_price >= 0"), nullable=True)

    quantity = Column(Integer, CheckConstraint("quantity >= 0"), nullable=False, default=0)

    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=True, index=True)
    model_id = Column(Integer, ForeignKey("device_models.id"), nullable=True, index=True)
    storage_id = Column(Integer, ForeignKey("storage_options.id"), nullable=True)
    ram_id = Column(Integer, ForeignKey("ram_options.id"), nullable=True)
    color_id = Column(Integer, ForeignKey("colors.id"), nullable=True)
    product_type_id = Column(Integer, ForeignKey("product_types.id"), nullable=True)

    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Optimistic concurrency counter, bumped by the ORM on every UPDATE
    version = Column(Integer, nullable=False, default=1)

    brand = relationship("Brand")
    model = relationship("DeviceModel")
    storage = relationship("StorageOption")
    ram = relationship("RamOption")
    color = relationship("Color")
    product_type = relationship("ProductType")
    units = relationship("Unit", back_populates="product")

    __mapper_args__ = {"version_id_col": version}

# backend/models/catalog.py
from sqlalchemy import Column, Integer, String, Boolean, CheckConstraint
from database import Base

# Master data referenced by products, movements and units.
# Maintained by the back office; the inventory services only read it.

class Brand(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)


# Phone model. The storage / color text columns predate the dedicated
# option tables and are still used for naming when a product has no direct option.
class DeviceModel(Base):
    __tablename__ = "device_models"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    storage = Column(String, nullable=True)
    color = Column(String, nullable=True)


class StorageOption(Base):
    __tablename__ = "storage_options"

    id = Column(Integer, primary_key=True, index=True)
    capacity = Column(Integer, CheckConstraint("capacity > 0"), nullable=False) # GB


class RamOption(Base):
    __tablename__ = "ram_options"

    id = Column(Integer, primary_key=True, index=True)
    capacity = Column(Integer, CheckConstraint("capacity > 0"), nullable=False) # GB


class Color(Base):
    __tablename__ = "colors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)


class ProductType(Base):
    __tablename__ = "product_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)


class Warehouse(Base):
    __tablename__ = "warehouses"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, nullable=True)
    name = Column(String, nullable=False)
    active = Column(Boolean, nullable=False, default=True)


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)

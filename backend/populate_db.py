import os
import sys

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

# Database models and setup
from database import SessionLocal, init_db
from models.catalog import Brand, DeviceModel, StorageOption, RamOption, Color, ProductType, Warehouse, Supplier
from models.movement import MovementType
from models.users import User

# Configuration
MOVEMENT_TYPES = [
    # (name, is_incoming, is_outgoing)
    ("Purchase", True, False),
    ("Customer return", True, False),
    ("Sale", False, True),
    ("Write-off", False, True),
    ("Transfer", False, False),
]
WAREHOUSES = [("MAIN", "Main warehouse"), ("STORE-1", "Store 1")]
BRANDS = ["Samsung", "Apple", "Xiaomi"]
STORAGE_GB = [64, 128, 256]
RAM_GB = [4, 6, 8]
COLORS = ["Black", "White", "Blue"]
PRODUCT_TYPES = ["Phone", "Accessory"]
ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
# End Configuration


def _get_or_create(session, model, defaults=None, **lookup):
    instance = session.query(model).filter_by(**lookup).first()
    if instance:
        return instance, False
    instance = model(**lookup, **(defaults or {}))
    session.add(instance)
    return instance, True


def populate_database():
    """Creates the reference data the movement ledger needs. Safe to run twice."""
    init_db()
    session = SessionLocal()
    created = 0
    try:
        for name, is_incoming, is_outgoing in MOVEMENT_TYPES:
            _, new = _get_or_create(session, MovementType, name=name,
                                    defaults={"is_incoming": is_incoming, "is_outgoing": is_outgoing})
            created += new
        for code, name in WAREHOUSES:
            _, new = _get_or_create(session, Warehouse, code=code, defaults={"name": name, "active": True})
            created += new
        for name in BRANDS:
            created += _get_or_create(session, Brand, name=name)[1]
        for gb in STORAGE_GB:
            created += _get_or_create(session, StorageOption, capacity=gb)[1]
        for gb in RAM_GB:
            created += _get_or_create(session, RamOption, capacity=gb)[1]
        for name in COLORS:
            created += _get_or_create(session, Color, name=name)[1]
        for name in PRODUCT_TYPES:
            created += _get_or_create(session, ProductType, name=name)[1]

        created += _get_or_create(session, DeviceModel, name="Galaxy A15")[1]
        created += _get_or_create(session, Supplier, name="Default supplier")[1]
        created += _get_or_create(session, User, email=ADMIN_EMAIL, defaults={"role": "ADMIN", "name": "Admin"})[1]

        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
    print(f"Seed finished, {created} new rows.")


if __name__ == "__main__":
    populate_database()

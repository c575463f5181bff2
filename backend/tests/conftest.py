import os
from types import SimpleNamespace
from typing import Iterator

# Settings are read at import time; keep tests off the developer database
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
import models.users, models.log, models.catalog  # noqa: E401,F401
import models.product, models.unit, models.movement  # noqa: E401,F401
from models.catalog import Brand, DeviceModel, StorageOption, RamOption, Color, ProductType, Warehouse, Supplier
from models.movement import MovementType
from models.product import Product
from models.users import User
from schemas.movement import MovementCreate
from services.identity import IdentityResolver
from services.movement_ledger import MovementLedger
from services.movement_validator import MovementValidator


@pytest.fixture()
def engine():
    """Fresh in-memory database per test, shared by every connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db(engine) -> Iterator[Session]:
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def seed(db: Session) -> SimpleNamespace:
    """Reference data: three movement kinds, two warehouses, a small catalog and two products."""
    purchase = MovementType(name="Purchase", is_incoming=True, is_outgoing=False)
    sale = MovementType(name="Sale", is_incoming=False, is_outgoing=True)
    transfer = MovementType(name="Transfer", is_incoming=False, is_outgoing=False)

    main = Warehouse(code="MAIN", name="Main warehouse", active=True)
    store = Warehouse(code="STORE-1", name="Store 1", active=True)
    supplier = Supplier(name="Default supplier")
    user = User(email="warehouse@example.com", role="WAREHOUSE", name="Stock Keeper")

    brand = Brand(name="Samsung")
    model = DeviceModel(name="Galaxy A15", storage="64GB", color="Red")
    storage_128 = StorageOption(capacity=128)
    storage_256 = StorageOption(capacity=256)
    ram_4 = RamOption(capacity=4)
    black = Color(name="Black")
    blue = Color(name="Blue")
    phone = ProductType(name="Phone")

    db.add_all([
        purchase, sale, transfer, main, store, supplier, user,
        brand, model, storage_128, storage_256, ram_4, black, blue, phone,
    ])
    db.flush()

    product = Product(
        name="Samsung Galaxy A15 128GB Black", quantity=0, active=True,
        brand_id=brand.id, model_id=model.id, storage_id=storage_128.id,
        color_id=black.id, product_type_id=phone.id,
    )
    other = Product(
        name="Samsung Galaxy A15 256GB Blue", quantity=0, active=True,
        brand_id=brand.id, model_id=model.id, storage_id=storage_256.id,
        color_id=blue.id, product_type_id=phone.id,
    )
    db.add_all([product, other])
    db.commit()

    return SimpleNamespace(
        purchase_id=purchase.id,
        sale_id=sale.id,
        transfer_id=transfer.id,
        main_id=main.id,
        store_id=store.id,
        supplier_id=supplier.id,
        user_id=user.id,
        user_email=user.email,
        brand_id=brand.id,
        model_id=model.id,
        storage_128_id=storage_128.id,
        storage_256_id=storage_256.id,
        ram_4_id=ram_4.id,
        black_id=black.id,
        blue_id=blue.id,
        phone_id=phone.id,
        product_id=product.id,
        other_product_id=other.id,
    )


@pytest.fixture()
def submit(db: Session, seed: SimpleNamespace):
    """Validate and record one movement the way POST /movements does."""
    def _submit(**fields):
        command = MovementValidator(IdentityResolver(db)).validate(MovementCreate(**fields))
        return MovementLedger(db).record(command, created_by_id=seed.user_id)
    return _submit


@pytest.fixture()
def client(db: Session, seed: SimpleNamespace) -> Iterator[TestClient]:
    from main import app
    from utils.tokenJWT import get_current_user

    def override_get_db():
        yield db

    def override_get_current_user():
        return db.get(User, seed.user_id)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    yield TestClient(app)
    app.dependency_overrides.clear()

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from config import settings
from database import (
    TransactionOptions, batch_transaction_options, default_transaction_options, transaction,
)
from models.catalog import Supplier
from models.product import Product
from services.errors import ConcurrencyConflictError, TransactionTimeoutError


def test_presets_come_from_settings():
    assert default_transaction_options() == TransactionOptions(
        max_wait=settings.TX_MAX_WAIT_SECONDS, timeout=settings.TX_TIMEOUT_SECONDS,
    )
    batch = batch_transaction_options()
    assert batch.max_wait == settings.BATCH_TX_MAX_WAIT_SECONDS
    assert batch.timeout == settings.BATCH_TX_TIMEOUT_SECONDS


def test_commits_on_success(db, seed):
    with transaction(db) as tx:
        db.add(Supplier(name="Acme"))
        assert tx.elapsed >= 0
    assert db.query(Supplier).filter(Supplier.name == "Acme").count() == 1


def test_rolls_back_and_reraises(db, seed):
    with pytest.raises(ValueError):
        with transaction(db):
            db.add(Supplier(name="Acme"))
            db.flush()
            raise ValueError("boom")
    assert db.query(Supplier).filter(Supplier.name == "Acme").count() == 0


def test_stale_product_version_is_a_conflict(db, seed):
    product = db.get(Product, seed.product_id)
    with pytest.raises(ConcurrencyConflictError):
        with transaction(db):
            product.quantity = 5
            # Another writer committed in between
            db.execute(text("UPDATE products SET version = version + 1 WHERE id = :id"), {"id": seed.product_id})
    assert db.query(Product.quantity).filter(Product.id == seed.product_id).scalar() == 0


def test_lock_timeout_becomes_typed_error(db, seed):
    with pytest.raises(TransactionTimeoutError) as exc:
        with transaction(db, TransactionOptions(max_wait=0.1, timeout=0.5)):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))
    assert exc.value.details["timeout"] == 0.5


def test_other_operational_errors_propagate(db, seed):
    with pytest.raises(OperationalError):
        with transaction(db):
            raise OperationalError("SELECT 1", {}, Exception("no such table: nowhere"))

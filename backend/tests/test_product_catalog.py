import pytest
from sqlalchemy.exc import IntegrityError

from database import TransactionOptions
from models.product import Product
from schemas.product import ProductBatchCreate, ProductCreate
from services.errors import BatchCreationError, CatalogReferenceNotFoundError, TransactionTimeoutError
from services.product_catalog import ProductCatalog, Variant, expand_variants


# ---- variant expansion ----

def test_empty_option_list_is_one_absent_choice():
    variants = expand_variants(["A", "B"], [], ["X"])
    assert variants == [
        Variant(storage_id="A", ram_id=None, color_id="X"),
        Variant(storage_id="B", ram_id=None, color_id="X"),
    ]


def test_full_cartesian_product():
    variants = expand_variants([1, 2], [3, 4], [5, 6, 7])
    assert len(variants) == 12
    assert len(set(variants)) == 12
    assert variants[0] == Variant(1, 3, 5)
    assert variants[-1] == Variant(2, 4, 7)


def test_no_options_at_all_is_one_variant():
    assert expand_variants([], [], []) == [Variant()]


def test_repeated_options_are_collapsed():
    assert expand_variants([1, 1, 2], [], []) == [Variant(storage_id=1), Variant(storage_id=2)]


# ---- creation ----

def _product_count(db):
    return db.query(Product).count()


def test_create_product_is_named_from_its_relations(db, seed):
    product = ProductCatalog(db).create_product(ProductCreate(
        brand_id=seed.brand_id, model_id=seed.model_id, product_type_id=seed.phone_id,
        storage_id=seed.storage_256_id, ram_id=seed.ram_4_id, color_id=seed.blue_id,
        cost="100", list_price="149.99",
    ))
    assert product.id is not None
    assert product.name == "Samsung Galaxy A15 256GB 4GB Blue"
    assert product.quantity == 0


def test_create_product_unknown_reference(db, seed):
    with pytest.raises(CatalogReferenceNotFoundError) as exc:
        ProductCatalog(db).create_product(ProductCreate(brand_id=999))
    assert exc.value.details == {"field": "brand_id", "value": 999}


def test_batch_creates_one_product_per_combination(db, seed):
    before = _product_count(db)
    products = ProductCatalog(db).create_batch(ProductBatchCreate(
        brand_id=seed.brand_id, model_id=seed.model_id,
        storage_ids=[seed.storage_128_id, seed.storage_256_id],
        color_ids=[seed.black_id, seed.blue_id],
    ))
    assert [p.name for p in products] == [
        "Samsung Galaxy A15 128GB Black",
        "Samsung Galaxy A15 128GB Blue",
        "Samsung Galaxy A15 256GB Black",
        "Samsung Galaxy A15 256GB Blue",
    ]
    assert _product_count(db) == before + 4


def test_batch_without_direct_options_uses_model_text(db, seed):
    products = ProductCatalog(db).create_batch(ProductBatchCreate(
        brand_id=seed.brand_id, model_id=seed.model_id, ram_ids=[seed.ram_4_id],
    ))
    assert [p.name for p in products] == ["Samsung Galaxy A15 64GB 4GB Red"]


def test_batch_with_unknown_option_creates_nothing(db, seed):
    before = _product_count(db)
    with pytest.raises(CatalogReferenceNotFoundError):
        ProductCatalog(db).create_batch(ProductBatchCreate(
            brand_id=seed.brand_id, color_ids=[seed.black_id, 999],
        ))
    assert _product_count(db) == before


def test_batch_failure_mid_way_rolls_back_every_variant(db, seed, monkeypatch):
    before = _product_count(db)
    original = ProductCatalog._new_product
    calls = []

    def failing_new_product(self, base, variant):
        calls.append(variant)
        if len(calls) == 2:
            raise IntegrityError("INSERT INTO products", {}, Exception("simulated constraint failure"))
        return original(self, base, variant)

    monkeypatch.setattr(ProductCatalog, "_new_product", failing_new_product)

    with pytest.raises(BatchCreationError) as exc:
        ProductCatalog(db).create_batch(ProductBatchCreate(
            brand_id=seed.brand_id, storage_ids=[seed.storage_128_id, seed.storage_256_id],
        ))
    assert exc.value.details["index"] == 1
    assert _product_count(db) == before


def test_batch_over_its_time_bound_is_rolled_back(db, seed):
    before = _product_count(db)
    options = TransactionOptions(max_wait=1.0, timeout=-1.0)
    with pytest.raises(TransactionTimeoutError):
        ProductCatalog(db).create_batch(
            ProductBatchCreate(brand_id=seed.brand_id, color_ids=[seed.black_id, seed.blue_id]),
            options=options,
        )
    assert _product_count(db) == before

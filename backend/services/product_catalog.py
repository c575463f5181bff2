# backend/services/product_catalog.py
"""
Product creation, single and combinatorial.

A batch request carries shared attributes plus option lists for storage,
memory and color. `expand_variants` turns them into the Cartesian product of
choices (an empty list counts as one "absent" choice) and `create_batch`
inserts one product per combination inside a single transaction.
"""
import itertools
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import TransactionOptions, batch_transaction_options, transaction
from models.product import Product
from schemas.product import ProductBase, ProductBatchCreate, ProductCreate
from services.errors import BatchCreationError, CatalogReferenceNotFoundError
from services.identity import IdentityResolver
from services.naming import FALLBACK_PRODUCT_NAME, compose_product_name

logger = logging.getLogger(__name__)

BASE_FIELDS = ("brand_id", "model_id", "product_type_id", "description", "cost", "list_price")


@dataclass(frozen=True)
class Variant:
    storage_id: Optional[int] = None
    ram_id: Optional[int] = None
    color_id: Optional[int] = None


def _options(ids: Iterable[int]) -> list:
    # Keep request order, drop repeats; no option at all is one absent choice
    unique = list(dict.fromkeys(ids or []))
    return unique or [None]


def expand_variants(storage_ids: Iterable[int], ram_ids: Iterable[int], color_ids: Iterable[int]) -> List[Variant]:
    return [
        Variant(storage_id=s, ram_id=r, color_id=c)
        for s, r, c in itertools.product(_options(storage_ids), _options(ram_ids), _options(color_ids))
    ]


class ProductCatalog:
    def __init__(self, db: Session, resolver: Optional[IdentityResolver] = None):
        self.db = db
        self.resolver = resolver or IdentityResolver(db)

    def _check_reference(self, field: str, value: Optional[int]) -> None:
        if value is not None and not self.resolver.catalog_reference_exists(field, value):
            raise CatalogReferenceNotFoundError(field, value)

    def _check_base(self, data: ProductBase) -> None:
        for field in ("brand_id", "model_id", "product_type_id"):
            self._check_reference(field, getattr(data, field))

    def _new_product(self, base: ProductBase, variant: Variant) -> Product:
        product = Product(
            name=FALLBACK_PRODUCT_NAME,
            quantity=0,
            active=True,
            storage_id=variant.storage_id,
            ram_id=variant.ram_id,
            color_id=variant.color_id,
            **{f: getattr(base, f) for f in BASE_FIELDS},
        )
        self.db.add(product)
        self.db.flush()
        # Naming needs the relation rows, which are only reachable once inserted
        self.db.refresh(product)
        product.name = compose_product_name(product)
        return product

    def create_product(self, data: ProductCreate) -> Product:
        self._check_base(data)
        variant = Variant(storage_id=data.storage_id, ram_id=data.ram_id, color_id=data.color_id)
        self._check_reference("storage_id", variant.storage_id)
        self._check_reference("ram_id", variant.ram_id)
        self._check_reference("color_id", variant.color_id)

        with transaction(self.db):
            product = self._new_product(data, variant)
        logger.info("Product %s created: %s", product.id, product.name)
        return product

    def create_batch(self, data: ProductBatchCreate, options: Optional[TransactionOptions] = None) -> List[Product]:
        self._check_base(data)
        for field, ids in (("storage_id", data.storage_ids), ("ram_id", data.ram_ids), ("color_id", data.color_ids)):
            for value in ids:
                self._check_reference(field, value)

        variants = expand_variants(data.storage_ids, data.ram_ids, data.color_ids)
        products: List[Product] = []
        with transaction(self.db, options or batch_transaction_options()) as tx:
            for index, variant in enumerate(variants):
                try:
                    products.append(self._new_product(data, variant))
                except IntegrityError as exc:
                    raise BatchCreationError(index, str(exc.orig)) from exc
                tx.check_deadline()

        logger.info("Product batch created: %d variants", len(products))
        return products

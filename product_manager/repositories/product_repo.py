import json
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from product_manager.config import settings
from product_manager.db import SessionLocal
from product_manager.repositories.storage_repo import StorageRepository
from product_manager.schemas.product_schema import Product, ProductStatus
from product_manager.utils.logs import get_logger

log = get_logger("product_store", "STORE")


class StorageParseError(Exception):
    """Persisted collection exists but can't be decoded into products."""
    pass


SEED_PRODUCTS: List[Product] = [
    Product(
        id="prod_1",
        name="AI-Powered Code Assistant",
        description=(
            "Boost your development workflow with an intelligent code completion and "
            "suggestion tool. Writes boilerplate, finds bugs, and explains complex code "
            "in plain English."
        ),
        category="SaaS / Developer Tool",
        price=19.99,
        status=ProductStatus.PUBLISHED,
        image_url="https://picsum.photos/seed/prod_1/400/300",
        created_at=datetime(2023, 10, 26, 10, 0, tzinfo=timezone.utc),
    ),
    Product(
        id="prod_2",
        name="The Ultimate Productivity Course",
        description=(
            "A comprehensive online course designed to help you master time management, "
            "focus, and goal setting. Includes video lessons, worksheets, and a private "
            "community."
        ),
        category="Online Course",
        price=249.00,
        status=ProductStatus.PUBLISHED,
        image_url="https://picsum.photos/seed/prod_2/400/300",
        created_at=datetime(2023, 11, 15, 14, 30, tzinfo=timezone.utc),
    ),
    Product(
        id="prod_3",
        name="Minimalist Icon Pack",
        description=(
            "A set of 500+ professionally designed, pixel-perfect icons for your web and "
            "mobile projects. Available in SVG and Figma formats for easy customization."
        ),
        category="Digital Asset",
        price=49.00,
        status=ProductStatus.DRAFT,
        image_url="https://picsum.photos/seed/prod_3/400/300",
        created_at=datetime(2024, 1, 20, 9, 0, tzinfo=timezone.utc),
    ),
]

_collection_adapter = TypeAdapter(List[Product])


def seed_products() -> List[Product]:
    return list(SEED_PRODUCTS)


def upsert(existing: Sequence[Product], product: Product) -> List[Product]:
    """
    Replace the product with the same id in place, or insert it and re-sort
    the whole collection newest first. Pure: the caller persists the result.
    """
    if any(p.id == product.id for p in existing):
        return [product if p.id == product.id else p for p in existing]
    items = list(existing) + [product]
    items.sort(key=lambda p: p.created_at, reverse=True)
    return items


def remove(existing: Sequence[Product], product_id: str) -> List[Product]:
    return [p for p in existing if p.id != product_id]


def decode_products(raw: str) -> List[Product]:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise StorageParseError(f"invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise StorageParseError(f"expected a list, got {type(data).__name__}")
    try:
        return _collection_adapter.validate_python(data)
    except ValidationError as e:
        raise StorageParseError(f"invalid product entry: {e.error_count()} error(s)") from e


def encode_products(products: Sequence[Product]) -> str:
    return json.dumps([p.to_storage() for p in products], ensure_ascii=False)


class ProductStore:
    """
    Owns the in-memory product list and mirrors it into one storage slot.

    Writes are gated by ``loaded``: until ``load()`` has run, ``save()`` is a
    logged no-op so an unloaded store can never clobber persisted data. Once
    loaded, every mutation is written back, including an empty collection.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        storage_key: Optional[str] = None,
    ):
        self.session_factory = session_factory
        self.storage_key = storage_key or settings.STORAGE_KEY
        self.products: List[Product] = []
        self.loaded = False

    def _read_raw(self) -> Optional[str]:
        with self.session_factory() as db:
            return StorageRepository(db).get_item(self.storage_key)

    def load(self) -> List[Product]:
        try:
            raw = self._read_raw()
            if raw is None:
                log.info("No stored products under '%s', using seed data.", self.storage_key)
                products = seed_products()
            else:
                products = decode_products(raw)
                log.info("Loaded %d products from '%s'.", len(products), self.storage_key)
        except StorageParseError as e:
            log.error("Could not parse stored products (%s), using seed data.", e)
            products = seed_products()
        except Exception:
            log.exception("Could not read stored products, using seed data.")
            products = seed_products()

        self.products = products
        self.loaded = True
        return list(products)

    def save(self, products: Sequence[Product]) -> bool:
        if not self.loaded:
            log.warning("Skipping save of %d products: store not loaded yet.", len(products))
            return False
        with self.session_factory() as db:
            StorageRepository(db).set_item(self.storage_key, encode_products(products))
        log.debug("Saved %d products.", len(products))
        return True

    def get(self, product_id: Optional[str]) -> Optional[Product]:
        if not product_id:
            return None
        return next((p for p in self.products if p.id == product_id), None)

    def put(self, product: Product) -> Product:
        products = upsert(self.products, product)
        # persist first so a failed write leaves memory matching storage
        self.save(products)
        self.products = products
        return product

    def delete(self, product_id: str) -> bool:
        products = remove(self.products, product_id)
        if len(products) == len(self.products):
            return False
        self.save(products)
        self.products = products
        return True

# app/catalog.py
import logging
import re
from typing import Sequence

from .errors import BackendError, ValidationFailed
from .models import utcnow
from .schemas import BulkProductRow, ProductCreate
from .settings import BULK_INSERT_BATCH_SIZE, DEFAULT_PRODUCT_STOCK, PRODUCTS_PAGE_SIZE
from .store import DataStore, StoreError

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def validate_bulk_rows(rows: Sequence[BulkProductRow]) -> list[str]:
    errors = []
    for index, row in enumerate(rows, start=1):
        if not (row.name or "").strip():
            errors.append(f"Row {index}: Name is required")
        if not (row.description or "").strip():
            errors.append(f"Row {index}: Description is required")
        if not (row.category or "").strip():
            errors.append(f"Row {index}: Category is required")
        if not row.price or row.price <= 0:
            errors.append(f"Row {index}: Price must be greater than 0")
    return errors


def chunked(items: list, size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


class ProductCatalog:
    def __init__(self, store: DataStore):
        self.store = store

    async def list_products(self, category: str | None = None, limit: int = PRODUCTS_PAGE_SIZE, offset: int = 0) -> list[dict]:
        filters = {}
        if category and category != "all":
            filters["category"] = category
        try:
            products = await self.store.select(
                "products", filters, order_by=("created_at", "id"), descending=True,
                limit=limit, offset=offset,
            )
        except StoreError as e:
            raise BackendError("Failed to fetch products", details=str(e))
        logger.info("Fetched %d products (category=%s)", len(products), category or "all")
        return products

    async def create_product(self, payload: ProductCreate) -> dict:
        if not payload.name or not payload.category or payload.price is None or payload.stock is None:
            raise ValidationFailed("Missing required fields: name, category, price, stock")

        try:
            product = await self.store.insert_one("products", {
                "name": payload.name,
                "description": payload.description,
                "category": payload.category,
                "price": float(payload.price),
                "stock": int(payload.stock),
                "image_url": payload.image_url,
                "seller_id": payload.seller_id,
            })
        except StoreError as e:
            raise BackendError("Failed to add product", details=str(e))
        logger.info("Product %s added", product["id"])
        return product

    async def ensure_categories(self, names: Sequence[str]) -> None:
        """Create any category in `names` that does not exist yet."""
        for name in dict.fromkeys(names):
            try:
                if await self.store.select_one("product_categories", {"name": name}):
                    continue
                await self.store.insert_one("product_categories", {
                    "name": name,
                    "description": f"{name} products",
                    "slug": slugify(name),
                })
                logger.info("Created product category %r", name)
            except StoreError as e:
                raise BackendError("Failed to create product category", details=str(e))

    async def bulk_upload(self, rows: Sequence[BulkProductRow], seller_id: str) -> list[dict]:
        """Validate and insert a seller's products in batches.

        All rows are validated first; one bad row rejects the whole upload.
        Batches are inserted one after another; if a batch fails, batches
        already written stay in the catalog.
        """
        if not rows:
            raise ValidationFailed("No products provided")

        errors = validate_bulk_rows(rows)
        if errors:
            raise ValidationFailed("Validation failed", details=errors)

        await self.ensure_categories([row.category.strip() for row in rows])

        now = utcnow()
        to_insert = [
            {
                "name": row.name.strip(),
                "description": row.description.strip(),
                "category": row.category.strip(),
                "price": float(row.price),
                "stock": row.stock or DEFAULT_PRODUCT_STOCK,
                "image_url": (row.image_url or "").strip() or None,
                "seller_id": seller_id,
                "created_at": now,
                "updated_at": now,
            }
            for row in rows
        ]

        inserted = []
        for batch in chunked(to_insert, BULK_INSERT_BATCH_SIZE):
            try:
                inserted.extend(await self.store.insert("products", batch))
            except StoreError as e:
                logger.error("Bulk insert stopped after %d of %d products", len(inserted), len(to_insert))
                raise BackendError("Failed to insert products", details=str(e))

        logger.info("Seller %s uploaded %d products", seller_id, len(inserted))
        return inserted

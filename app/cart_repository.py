# app/cart_repository.py
import logging

from .errors import BackendError, ValidationFailed
from .schemas import ProductSnapshot
from .store import DataStore, StoreError

logger = logging.getLogger(__name__)

TABLE = "cart_items"


class CartItemRepository:
    """CRUD over cart rows, plus add-or-accumulate on (user_id, product_id).

    Every method is a single read or write against the store; add() is a
    read followed by a write, so two concurrent adds of the same product can
    lose one of the increments.
    """

    def __init__(self, store: DataStore):
        self.store = store

    async def list(self, user_id: str) -> list[dict]:
        if not user_id:
            raise ValidationFailed("User ID is required")
        try:
            return await self.store.select(
                TABLE, {"user_id": user_id}, order_by=("created_at", "id"), descending=True
            )
        except StoreError as e:
            raise BackendError("Failed to fetch cart items", details=str(e))

    async def get(self, user_id: str, product_id: int) -> dict | None:
        try:
            return await self.store.select_one(TABLE, {"user_id": user_id, "product_id": product_id})
        except StoreError as e:
            raise BackendError("Failed to check cart item", details=str(e))

    async def add(
        self,
        user_id: str,
        product_id: int,
        quantity: int = 1,
        snapshot: ProductSnapshot | None = None,
        accumulate: bool = True,
    ) -> tuple[dict, bool]:
        """Add `quantity` of a product; returns (row, created).

        With accumulate=False an existing row gets `quantity` as its new
        value instead of being incremented.
        """
        if not user_id or not product_id:
            raise ValidationFailed("User ID and Product ID are required")
        if quantity <= 0:
            raise ValidationFailed("Quantity must be greater than 0")

        existing = await self.get(user_id, product_id)

        if existing:
            new_quantity = existing["quantity"] + quantity if accumulate else quantity
            logger.info(
                "Cart %s: product %s quantity %s -> %s",
                user_id, product_id, existing["quantity"], new_quantity,
            )
            try:
                rows = await self.store.update(TABLE, {"quantity": new_quantity}, {"id": existing["id"]})
            except StoreError as e:
                raise BackendError("Failed to update cart item", details=str(e))
            if not rows:
                raise BackendError("Failed to update cart item", details="row disappeared during update")
            return rows[0], False

        snapshot = snapshot or ProductSnapshot()
        logger.info("Cart %s: adding product %s x%s", user_id, product_id, quantity)
        try:
            row = await self.store.insert_one(TABLE, {
                "user_id": user_id,
                "product_id": product_id,
                "quantity": quantity,
                **snapshot.to_cart_columns(),
            })
        except StoreError as e:
            raise BackendError("Failed to add item to cart", details=str(e))
        return row, True

    async def set_quantity(self, cart_item_id: int, quantity: int) -> dict | None:
        """Set a row's quantity; zero or less deletes it and returns None."""
        if not cart_item_id or quantity is None:
            raise ValidationFailed("Cart item ID and quantity are required")

        if quantity <= 0:
            try:
                await self.store.delete(TABLE, {"id": cart_item_id})
            except StoreError as e:
                raise BackendError("Failed to remove cart item", details=str(e))
            return None

        try:
            rows = await self.store.update(TABLE, {"quantity": quantity}, {"id": cart_item_id})
        except StoreError as e:
            raise BackendError("Failed to update quantity", details=str(e))
        if not rows:
            raise BackendError("Failed to update quantity", details=f"cart item {cart_item_id} not found")
        return rows[0]

    async def remove(self, cart_item_id: int, user_id: str | None = None) -> None:
        if not cart_item_id:
            raise ValidationFailed("Cart item ID is required")
        filters = {"id": cart_item_id}
        # scoping by owner keeps one user from deleting another user's rows
        if user_id:
            filters["user_id"] = user_id
        try:
            await self.store.delete(TABLE, filters)
        except StoreError as e:
            raise BackendError("Failed to remove cart item", details=str(e))

    async def clear(self, user_id: str) -> None:
        if not user_id:
            raise ValidationFailed("User ID is required")
        try:
            await self.store.delete(TABLE, {"user_id": user_id})
        except StoreError as e:
            raise BackendError("Failed to clear cart", details=str(e))

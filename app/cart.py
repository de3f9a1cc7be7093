# app/cart.py
from typing import Optional

from fastapi import APIRouter, Depends

from .cart_repository import CartItemRepository
from .errors import ValidationFailed
from .schemas import CartAddRequest, CartClearRequest, CartUpdateRequest
from .store import DataStore, get_store

router = APIRouter(prefix="/api/cart", tags=["cart"])


def get_repository(store: DataStore = Depends(get_store)) -> CartItemRepository:
    return CartItemRepository(store)


@router.get("")
async def get_cart(userId: Optional[str] = None, repo: CartItemRepository = Depends(get_repository)):
    if not userId:
        raise ValidationFailed("User ID is required")
    return {"cartItems": await repo.list(userId)}


@router.post("")
async def add_to_cart(payload: CartAddRequest, repo: CartItemRepository = Depends(get_repository)):
    if not payload.user_id or not payload.product_id:
        raise ValidationFailed("User ID and Product ID are required")

    item, created = await repo.add(
        payload.user_id,
        payload.product_id,
        payload.quantity,
        payload.product_data,
        accumulate=payload.mode == "add",
    )
    return {
        "success": True,
        "cartItem": item,
        "message": "Item added to cart" if created else "Cart item updated",
    }


@router.put("")
async def update_cart_item(payload: CartUpdateRequest, repo: CartItemRepository = Depends(get_repository)):
    if not payload.cart_item_id or payload.quantity is None:
        raise ValidationFailed("Cart item ID and quantity are required")

    item = await repo.set_quantity(payload.cart_item_id, payload.quantity)
    if item is None:
        return {"success": True, "message": "Item removed from cart"}
    return {"success": True, "cartItem": item, "message": "Quantity updated"}


@router.delete("")
async def remove_cart_item(
    cartItemId: Optional[int] = None,
    userId: Optional[str] = None,
    repo: CartItemRepository = Depends(get_repository),
):
    if not cartItemId:
        raise ValidationFailed("Cart item ID is required")
    await repo.remove(cartItemId, userId)
    return {"success": True, "message": "Item removed from cart"}


@router.post("/clear")
async def clear_cart(payload: CartClearRequest, repo: CartItemRepository = Depends(get_repository)):
    if not payload.user_id:
        raise ValidationFailed("User ID is required")
    await repo.clear(payload.user_id)
    return {"success": True, "message": "Cart cleared successfully"}

# app/cart_client.py
import logging

import httpx

from .schemas import ProductSnapshot
from .settings import API_BASE_URL

logger = logging.getLogger(__name__)


class CartSyncError(Exception):
    def __init__(self, status_code: int, error: str, details=None):
        super().__init__(f"{status_code}: {error}")
        self.status_code = status_code
        self.error = error
        self.details = details


class CartApiClient:
    """Talks to /api/cart over HTTP with the same methods as CartItemRepository.

    Lets CartState and reconcile_cart run against a remote deployment.
    Pass `client` to reuse an existing httpx.AsyncClient (tests pass one
    built on a mock transport).
    """

    def __init__(self, base_url: str | None = None, client: httpx.AsyncClient | None = None, timeout: float = 10.0):
        self.base_url = (base_url or API_BASE_URL).rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error("Cart API %s %s unreachable: %s", method, path, e)
            raise CartSyncError(503, "Cart service unavailable", details=str(e)) from e

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.status_code >= 400:
            logger.error("Cart API %s %s returned %s: %s", method, path, resp.status_code, data)
            raise CartSyncError(resp.status_code, data.get("error", resp.reason_phrase), data.get("details"))
        return data

    async def list(self, user_id: str) -> list[dict]:
        data = await self._request("GET", "/api/cart", params={"userId": user_id})
        return data.get("cartItems") or []

    async def add(
        self,
        user_id: str,
        product_id: int,
        quantity: int = 1,
        snapshot: ProductSnapshot | None = None,
        accumulate: bool = True,
    ) -> tuple[dict, bool]:
        body = {
            "userId": user_id,
            "productId": product_id,
            "quantity": quantity,
            "productData": (snapshot or ProductSnapshot()).model_dump(),
        }
        if not accumulate:
            body["mode"] = "replace"
        data = await self._request("POST", "/api/cart", json=body)
        return data["cartItem"], data.get("message") == "Item added to cart"

    async def set_quantity(self, cart_item_id: int, quantity: int) -> dict | None:
        data = await self._request("PUT", "/api/cart", json={"cartItemId": cart_item_id, "quantity": quantity})
        return data.get("cartItem")

    async def remove(self, cart_item_id: int, user_id: str | None = None) -> None:
        params = {"cartItemId": cart_item_id}
        if user_id:
            params["userId"] = user_id
        await self._request("DELETE", "/api/cart", params=params)

    async def clear(self, user_id: str) -> None:
        await self._request("POST", "/api/cart/clear", json={"userId": user_id})

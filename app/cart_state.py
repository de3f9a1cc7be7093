# app/cart_state.py
import logging
from typing import Callable

from .cart_merge import ReconciliationError, sync_local_cart_with_backend
from .errors import ValidationFailed
from .schemas import LocalCartEntry, MergedCartEntry

logger = logging.getLogger(__name__)

Listener = Callable[["CartState"], None]


class CartState:
    """The cart of one client session.

    Signed out, every mutation stays in memory. Signed in, mutations go to
    the backend (a CartItemRepository or CartApiClient) and the entries
    mirror the stored rows. count and total are recomputed after every
    change, then subscribers are notified.
    """

    def __init__(self, backend):
        self.backend = backend
        self.user_id: str | None = None
        self.items: list[MergedCartEntry] = []
        self.count = 0
        self.total = 0.0
        self._listeners: list[Listener] = []

    @property
    def signed_in(self) -> bool:
        return self.user_id is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_items(self, items: list[MergedCartEntry]):
        self.items = items
        self.count = sum(i.quantity for i in items)
        self.total = round(sum(i.quantity * i.price for i in items), 2)
        for listener in list(self._listeners):
            listener(self)

    def _find(self, product_id: int) -> MergedCartEntry | None:
        return next((i for i in self.items if i.product_id == product_id), None)

    async def refresh(self):
        if not self.signed_in:
            return
        rows = await self.backend.list(self.user_id)
        self._set_items([MergedCartEntry.from_cart_row(r) for r in rows])

    async def sign_in(self, user_id: str):
        """Fold the signed-out cart into the user's stored cart.

        Signing in as the user already signed in only reloads the cart.
        Switching directly to another user starts from an empty local cart,
        so one user's stored rows never end up in another user's cart.
        If some entries cannot be saved, the cart shows what was stored plus
        the unsaved entries (without backend ids), and ReconciliationError
        is raised.
        """
        if self.user_id == user_id:
            await self.refresh()
            return
        if self.signed_in:
            self.user_id = None
            self._set_items([])

        local = [LocalCartEntry(**i.model_dump(exclude={"backend_id"})) for i in self.items]
        self.user_id = user_id
        try:
            await sync_local_cart_with_backend(self.backend, user_id, local)
        except ReconciliationError as e:
            try:
                await self.refresh()
            except Exception as refresh_error:
                logger.error("Reloading cart for user %s after a partial sync failed: %s", user_id, refresh_error)
            self._keep_unsaved([f.entry for f in e.result.failures])
            raise
        except Exception:
            # nothing was merged; stay signed out with the local cart intact
            self.user_id = None
            raise
        await self.refresh()

    def _keep_unsaved(self, entries: list[MergedCartEntry]):
        stored = {i.product_id for i in self.items}
        unsaved = [
            MergedCartEntry(**e.model_dump(exclude={"backend_id"}))
            for e in entries
            if e.product_id not in stored
        ]
        self._set_items(self.items + unsaved)

    def sign_out(self):
        self.user_id = None
        self._set_items([MergedCartEntry(**i.model_dump(exclude={"backend_id"})) for i in self.items])

    async def add_item(self, product: LocalCartEntry | dict, quantity: int = 1):
        if quantity <= 0:
            raise ValidationFailed("Quantity must be greater than 0")

        if isinstance(product, dict):
            product = LocalCartEntry(**{**product, "quantity": quantity})
        else:
            product = product.model_copy(update={"quantity": quantity})

        if self.signed_in:
            row, _ = await self.backend.add(self.user_id, product.product_id, quantity, product.snapshot())
            entry = MergedCartEntry.from_cart_row(row)
            items = [i for i in self.items if i.product_id != entry.product_id]
            self._set_items([entry] + items)
            return

        existing = self._find(product.product_id)
        if existing:
            existing.quantity += quantity
            self._set_items(list(self.items))
        else:
            self._set_items(self.items + [MergedCartEntry(**product.model_dump())])

    async def update_quantity(self, product_id: int, quantity: int):
        if quantity <= 0:
            await self.remove_item(product_id)
            return

        entry = self._find(product_id)
        if entry is None:
            return

        if self.signed_in and entry.backend_id is not None:
            row = await self.backend.set_quantity(entry.backend_id, quantity)
            if row is not None:
                entry.quantity = row["quantity"]
        else:
            entry.quantity = quantity
        self._set_items(list(self.items))

    async def remove_item(self, product_id: int):
        entry = self._find(product_id)
        if entry is None:
            return
        if self.signed_in and entry.backend_id is not None:
            await self.backend.remove(entry.backend_id, self.user_id)
        self._set_items([i for i in self.items if i.product_id != product_id])

    async def clear_cart(self):
        if self.signed_in:
            await self.backend.clear(self.user_id)
        self._set_items([])

# app/cart_merge.py
"""Reconciling a signed-out cart with the cart stored for the user.

merge_cart_items() is pure: it decides what the cart should contain.
reconcile_cart() writes that decision back, one row at a time, through any
backend exposing the repository's add() (CartItemRepository or CartApiClient).
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .schemas import LocalCartEntry, MergedCartEntry

logger = logging.getLogger(__name__)


def merge_cart_items(
    local: Iterable[LocalCartEntry],
    remote: Iterable[dict],
) -> list[MergedCartEntry]:
    """Merge local entries with remote cart rows, one entry per product.

    A product on both sides keeps the larger of the two quantities: both
    carts are things the user asked for, so neither total is dropped.
    Remote-only products are appended with their row id as backend_id.
    Local entries are expected to have unique product ids already.
    """
    merged = [MergedCartEntry(**entry.model_dump()) for entry in local]
    by_product = {entry.product_id: entry for entry in merged}

    for row in remote:
        entry = by_product.get(row["product_id"])
        if entry is not None:
            entry.quantity = max(entry.quantity, row["quantity"])
        else:
            entry = MergedCartEntry.from_cart_row(row)
            merged.append(entry)
            by_product[entry.product_id] = entry

    return merged


@dataclass
class ReconcileFailure:
    entry: MergedCartEntry
    error: Exception

    @property
    def product_id(self) -> int:
        return self.entry.product_id


@dataclass
class ReconcileResult:
    rows: list = field(default_factory=list)
    failures: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class ReconciliationError(Exception):
    """Some merged entries could not be written; the rest were."""

    def __init__(self, result: ReconcileResult):
        self.result = result
        products = ", ".join(str(f.product_id) for f in result.failures)
        super().__init__(f"Failed to sync {len(result.failures)} cart item(s): {products}")


async def reconcile_cart(backend, user_id: str, merged: Sequence[MergedCartEntry]) -> ReconcileResult:
    """Write every merged entry to the backend, overwriting stored quantities.

    Best effort: a failing entry does not stop the others. Raises
    ReconciliationError at the end if anything failed; nothing is rolled back.
    """
    result = ReconcileResult()
    for entry in merged:
        try:
            row, _ = await backend.add(
                user_id,
                entry.product_id,
                entry.quantity,
                entry.snapshot(),
                accumulate=False,
            )
            result.rows.append(row)
        except Exception as e:
            logger.warning("Cart sync for user %s failed on product %s: %s", user_id, entry.product_id, e)
            result.failures.append(ReconcileFailure(entry, e))

    if result.failures:
        raise ReconciliationError(result)
    return result


async def sync_local_cart_with_backend(backend, user_id: str, local: Iterable[LocalCartEntry]) -> list[MergedCartEntry]:
    """Fetch the stored cart, merge the local one into it and persist the result."""
    remote = await backend.list(user_id)
    merged = merge_cart_items(local, remote)
    logger.info(
        "Syncing cart for user %s: %d stored, %d merged", user_id, len(remote), len(merged)
    )

    result = await reconcile_cart(backend, user_id, merged)
    ids = {row["product_id"]: row["id"] for row in result.rows}
    for entry in merged:
        entry.backend_id = ids.get(entry.product_id, entry.backend_id)
    return merged

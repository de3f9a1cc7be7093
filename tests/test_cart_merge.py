import pytest

from app.cart_merge import (
    ReconciliationError,
    merge_cart_items,
    reconcile_cart,
    sync_local_cart_with_backend,
)
from app.cart_repository import CartItemRepository
from app.errors import BackendError
from app.schemas import LocalCartEntry, ProductSnapshot


def local(product_id, quantity, price=10.0):
    return LocalCartEntry(product_id=product_id, quantity=quantity, name=f"P{product_id}", price=price)


def remote(row_id, product_id, quantity, price=10.0):
    return {
        "id": row_id,
        "user_id": "u1",
        "product_id": product_id,
        "quantity": quantity,
        "product_name": f"P{product_id}",
        "product_description": None,
        "product_price": price,
        "product_image": None,
        "product_category": "Misc",
        "seller_id": "s1",
    }


def test_merge_scenario_local_and_remote():
    merged = merge_cart_items([local(1, 2)], [remote(70, 1, 5), remote(71, 2, 1)])

    assert [(e.product_id, e.quantity, e.backend_id) for e in merged] == [
        (1, 5, None),
        (2, 1, 71),
    ]
    assert merged[1].name == "P2"
    assert merged[1].category == "Misc"


@pytest.mark.parametrize("local_qty,remote_qty", [(2, 5), (5, 2), (3, 3)])
def test_shared_product_keeps_larger_quantity(local_qty, remote_qty):
    merged = merge_cart_items([local(1, local_qty)], [remote(9, 1, remote_qty)])
    assert merged[0].quantity == max(local_qty, remote_qty)


def test_every_product_appears_once():
    merged = merge_cart_items(
        [local(1, 1), local(2, 1), local(3, 1)],
        [remote(10, 3, 4), remote(11, 4, 1), remote(12, 5, 2)],
    )
    assert sorted(e.product_id for e in merged) == [1, 2, 3, 4, 5]


def test_empty_inputs():
    assert merge_cart_items([], []) == []
    assert [e.product_id for e in merge_cart_items([local(1, 1)], [])] == [1]
    assert [e.backend_id for e in merge_cart_items([], [remote(3, 7, 1)])] == [3]


def test_merge_does_not_touch_inputs():
    entries = [local(1, 2)]
    merge_cart_items(entries, [remote(70, 1, 5)])
    assert entries[0].quantity == 2


class FlakyBackend:
    def __init__(self, failing):
        self.failing = set(failing)
        self.calls = []

    async def add(self, user_id, product_id, quantity, snapshot=None, accumulate=True):
        self.calls.append((product_id, quantity, accumulate))
        if product_id in self.failing:
            raise BackendError("Failed to add item to cart", details="boom")
        return {"id": product_id * 100, "product_id": product_id, "quantity": quantity}, True


@pytest.mark.asyncio
async def test_reconcile_keeps_going_after_a_failure():
    backend = FlakyBackend(failing={2})
    merged = merge_cart_items([local(1, 1), local(2, 2), local(3, 3)], [])

    with pytest.raises(ReconciliationError) as exc_info:
        await reconcile_cart(backend, "u1", merged)

    assert [c[0] for c in backend.calls] == [1, 2, 3]
    assert all(c[2] is False for c in backend.calls)
    result = exc_info.value.result
    assert [r["product_id"] for r in result.rows] == [1, 3]
    assert [f.product_id for f in result.failures] == [2]
    assert result.failures[0].entry.quantity == 2


@pytest.mark.asyncio
async def test_reconcile_all_ok():
    backend = FlakyBackend(failing=())
    result = await reconcile_cart(backend, "u1", merge_cart_items([local(1, 1)], []))
    assert result.ok
    assert len(result.rows) == 1


@pytest.mark.asyncio
async def test_sync_is_stable_when_repeated(store):
    repo = CartItemRepository(store)
    await repo.add("u1", 1, 5, ProductSnapshot(name="P1", price=10.0))
    await repo.add("u1", 2, 1, ProductSnapshot(name="P2", price=3.0))
    local_cart = [local(1, 2), local(3, 4)]

    first = await sync_local_cart_with_backend(repo, "u1", local_cart)
    stored = {r["product_id"]: r["quantity"] for r in await repo.list("u1")}
    assert stored == {1: 5, 2: 1, 3: 4}
    assert all(e.backend_id is not None for e in first)

    second = await sync_local_cart_with_backend(repo, "u1", local_cart)
    assert {e.product_id: e.quantity for e in second} == {e.product_id: e.quantity for e in first}
    assert {r["product_id"]: r["quantity"] for r in await repo.list("u1")} == stored


def test_merging_twice_changes_nothing():
    rows = [remote(70, 1, 5), remote(71, 2, 1)]
    once = merge_cart_items([local(1, 2), local(3, 4)], rows)
    twice = merge_cart_items(once, rows)
    assert [(e.product_id, e.quantity) for e in twice] == [(e.product_id, e.quantity) for e in once]

import asyncio
import json

import httpx
import pytest

from storefront.client.gateway import CartSyncGateway
from storefront.client.storage import (
    CART_DATA_KEY,
    CART_ID_KEY,
    JsonFileStorage,
    LocalCartCache,
    MemoryStorage,
)
from storefront.client.store import CartStore

CART_URL = "http://shop.test/api/cart"


class RecordingEndpoint:
    def __init__(self, status=200):
        self.status = status
        self.posted = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            self.posted.append(json.loads(request.content))
        return httpx.Response(self.status, json={"success": self.status < 400})


def _store(storage=None, endpoint=None, errors=None):
    storage = storage if storage is not None else MemoryStorage()
    gateway = None
    if endpoint is not None:
        gateway = CartSyncGateway(
            CART_URL,
            transport=httpx.MockTransport(endpoint),
            on_error=(lambda op, cid, exc: errors.append((op, cid))) if errors is not None else None,
        )
    return CartStore(LocalCartCache(storage), gateway), storage


def _assert_totals(cart):
    assert cart.total_items == sum(it.quantity for it in cart.items)
    assert cart.total_price == pytest.approx(sum(float(it.variant["price"]) * it.quantity for it in cart.items))


def test_get_cart_creates_and_persists_new_cart():
    store, storage = _store()

    async def scenario():
        first = await store.get_cart()
        second = await store.get_cart()
        return first, second

    first, second = asyncio.run(scenario())
    assert first.items == [] and first.total_items == 0 and first.total_price == 0
    assert first.id.startswith("cart_")
    assert storage.get(CART_ID_KEY) == first.id
    assert second.id == first.id
    assert json.loads(storage.get(CART_DATA_KEY))["id"] == first.id


def test_get_cart_recovers_from_corrupt_cache():
    storage = MemoryStorage({CART_ID_KEY: "cart_fixed", CART_DATA_KEY: "{not json"})
    store, _ = _store(storage)
    cart = asyncio.run(store.get_cart())
    assert cart.id == "cart_fixed"
    assert cart.items == []
    assert json.loads(storage.get(CART_DATA_KEY))["items"] == []

    storage.set(CART_DATA_KEY, json.dumps({"id": "cart_fixed", "items": "garbage"}))
    assert asyncio.run(store.get_cart()).items == []


def test_add_update_remove_scenario(sample_product, sample_variant):
    endpoint = RecordingEndpoint()
    store, _ = _store(endpoint=endpoint)
    p1, v1 = sample_product(1), sample_variant(1, 1, price="10.00")

    async def scenario():
        carts = []
        carts.append(await store.add_item(p1, v1, 2))
        carts.append(await store.add_item(p1, v1, 1))
        carts.append(await store.update_item(1, 1, 1))
        carts.append(await store.remove_item(1, 1))
        await store.gateway.drain()
        return carts

    added, merged, updated, removed = asyncio.run(scenario())
    assert added.total_items == 2
    assert len(merged.items) == 1
    assert merged.items[0].quantity == 3
    assert merged.total_price == pytest.approx(30.0)
    assert updated.items[0].quantity == 1
    assert updated.total_price == pytest.approx(10.0)
    assert removed.items == []
    assert removed.total_items == 0 and removed.total_price == 0
    for cart in (added, merged, updated, removed):
        _assert_totals(cart)
    # one push per mutation, each a full snapshot
    assert sorted(doc["totalItems"] for doc in endpoint.posted) == [0, 1, 2, 3]


def test_update_to_zero_removes_item(sample_product, sample_variant):
    store, _ = _store()

    async def scenario():
        await store.add_item(sample_product(1), sample_variant(1, 1), 4)
        await store.add_item(sample_product(2), sample_variant(2, 2, price="3.00"), 1)
        return await store.update_item(1, 1, 0)

    cart = asyncio.run(scenario())
    assert [it.key for it in cart.items] == [(2, 2)]
    _assert_totals(cart)


def test_update_and_remove_absent_items_are_noops(sample_product, sample_variant):
    endpoint = RecordingEndpoint()
    store, storage = _store(endpoint=endpoint)

    async def scenario():
        before = await store.add_item(sample_product(1), sample_variant(1, 1), 1)
        await store.gateway.drain()
        snapshot = storage.get(CART_DATA_KEY)
        after_update = await store.update_item(99, 99, 5)
        after_remove = await store.remove_item(99, 99)
        await store.gateway.drain()
        return before, snapshot, after_update, after_remove

    before, snapshot, after_update, after_remove = asyncio.run(scenario())
    assert after_update.to_dict() == before.to_dict()
    assert after_remove.to_dict() == before.to_dict()
    assert storage.get(CART_DATA_KEY) == snapshot
    assert len(endpoint.posted) == 1


def test_clear_keeps_cart_id(sample_product, sample_variant):
    endpoint = RecordingEndpoint()
    store, _ = _store(endpoint=endpoint)

    async def scenario():
        added = await store.add_item(sample_product(1), sample_variant(1, 1), 3)
        cleared = await store.clear()
        await store.gateway.drain()
        return added, cleared

    added, cleared = asyncio.run(scenario())
    assert cleared.id == added.id
    assert cleared.items == []
    assert cleared.total_items == 0
    assert cleared.total_price == 0
    assert endpoint.posted[-1]["id"] == added.id
    assert endpoint.posted[-1]["items"] == []


def test_push_failure_does_not_affect_local_state(sample_product, sample_variant):
    errors = []
    store, storage = _store(endpoint=RecordingEndpoint(status=500), errors=errors)

    async def scenario():
        cart = await store.add_item(sample_product(1), sample_variant(1, 1), 2)
        await store.gateway.drain()
        return cart

    cart = asyncio.run(scenario())
    assert cart.total_items == 2
    assert json.loads(storage.get(CART_DATA_KEY))["totalItems"] == 2
    assert errors == [("push", cart.id)]


def test_add_rejects_bad_quantity_without_touching_cache(sample_product, sample_variant):
    store, storage = _store()
    asyncio.run(store.get_cart())
    snapshot = storage.get(CART_DATA_KEY)
    with pytest.raises(ValueError):
        asyncio.run(store.add_item(sample_product(1), sample_variant(1, 1), 0))
    assert storage.get(CART_DATA_KEY) == snapshot


def test_queries(sample_product, sample_variant):
    store, _ = _store()

    async def scenario():
        await store.add_item(sample_product(1), sample_variant(1, 1), 2)
        await store.add_item(sample_product(1), sample_variant(2, 1), 1)
        return await store.get_item_count(), await store.is_item_in_cart(1, 2), await store.is_item_in_cart(1, 3)

    assert asyncio.run(scenario()) == (3, True, False)


def test_json_file_storage_survives_new_store(tmp_path, sample_product, sample_variant):
    path = tmp_path / "profile" / "local_storage.json"
    store, _ = _store(JsonFileStorage(path))
    cart = asyncio.run(store.add_item(sample_product(1), sample_variant(1, 1), 2))

    reopened, _ = _store(JsonFileStorage(path))
    again = asyncio.run(reopened.get_cart())
    assert again.id == cart.id
    assert again.total_items == 2


def test_fetch_remote_reads_current_cart_id(sample_cart_item):
    storage = MemoryStorage({CART_ID_KEY: "cart_remote"})
    seen = []

    def endpoint(request):
        seen.append(request.url.params["id"])
        return httpx.Response(200, json={"id": "cart_remote", "items": [sample_cart_item(1, 1, 2)]})

    store, _ = _store(storage, endpoint=endpoint)
    remote = asyncio.run(store.fetch_remote())
    assert seen == ["cart_remote"]
    assert remote.total_items == 2

    assert asyncio.run(_store()[0].fetch_remote()) is None


@pytest.mark.parametrize("overrides", [{"product": 5}, {"variant": 5}, {"quantity": 0}])
def test_get_cart_falls_back_on_corrupt_items(sample_cart_item, overrides):
    item = sample_cart_item(1, 1, 2)
    item.update(overrides)
    storage = MemoryStorage({
        CART_ID_KEY: "cart_fixed",
        CART_DATA_KEY: json.dumps({"id": "cart_fixed", "items": [item]}),
    })
    store, _ = _store(storage)
    cart = asyncio.run(store.get_cart())
    assert cart.id == "cart_fixed"
    assert cart.items == []
    assert cart.total_items == 0
    assert json.loads(storage.get(CART_DATA_KEY))["items"] == []

import pytest
from sqlalchemy import func, select
from headphoneweb.db.schema import CartItem, CartSession

SESSION = "browser-session-1"
OTHER = "browser-session-2"


async def _count_items(fetch_all):
    rows = await fetch_all(select(func.count().label("n")).select_from(CartItem))
    return rows[0]["n"]


@pytest.mark.asyncio
async def test_empty_cart_for_unknown_session(client):
    resp = await client.get("/api/cart", params={"sessionId": SESSION})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "items": []}


@pytest.mark.asyncio
async def test_get_cart_requires_session_id(client):
    resp = await client.get("/api/cart")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Session ID is required"


@pytest.mark.asyncio
async def test_add_creates_session_and_returns_snapshot(client, make_product, fetch_all):
    pid = await make_product(price="149.50", stock=5)

    resp = await client.post("/api/cart", json={"sessionId": SESSION, "productId": pid, "quantity": 2})
    assert resp.status_code == 200, resp.text
    items = resp.json()["items"]
    assert len(items) == 1
    item = items[0]
    assert item["product_id"] == pid
    assert item["quantity"] == 2
    assert item["price"] == 149.5
    assert item["stock_quantity"] == 5
    assert item["name"] == "Studio Reference One"
    assert "image_url" in item

    sessions = await fetch_all(select(CartSession.user_identifier))
    assert sessions == [{"user_identifier": SESSION}]


@pytest.mark.asyncio
async def test_adding_same_product_increments_one_row(client, make_product):
    pid = await make_product(stock=10)

    await client.post("/api/cart", json={"sessionId": SESSION, "productId": pid, "quantity": 2})
    resp = await client.post("/api/cart", json={"sessionId": SESSION, "productId": pid, "quantity": 3})

    items = resp.json()["items"]
    assert len(items) == 1
    assert items[0]["quantity"] == 5


@pytest.mark.asyncio
async def test_add_beyond_stock_counts_existing_quantity(client, make_product, fetch_all):
    pid = await make_product(stock=4)
    await client.post("/api/cart", json={"sessionId": SESSION, "productId": pid, "quantity": 3})

    resp = await client.post("/api/cart", json={"sessionId": SESSION, "productId": pid, "quantity": 2})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Insufficient stock"
    assert body["available"] == 4
    assert body["requested"] == 5

    rows = await fetch_all(select(CartItem.quantity))
    assert rows == [{"quantity": 3}]


@pytest.mark.asyncio
async def test_add_unknown_product_is_404(client):
    resp = await client.post("/api/cart", json={"sessionId": SESSION, "productId": 9999, "quantity": 1})
    assert resp.status_code == 404
    assert resp.json()["error"] == "Product not found"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload, message", [
    ({"productId": 1, "quantity": 1}, "Session ID is required"),
    ({"sessionId": SESSION, "quantity": 1}, "Product ID is required"),
    ({"sessionId": SESSION, "productId": 1, "quantity": 0}, "Quantity must be a positive integer"),
])
async def test_add_missing_fields_write_nothing(client, make_product, fetch_all, payload, message):
    await make_product()
    resp = await client.post("/api/cart", json=payload)
    assert resp.status_code == 400
    assert resp.json()["error"] == message
    assert await _count_items(fetch_all) == 0
    assert await fetch_all(select(CartSession.session_id)) == []


@pytest.mark.asyncio
async def test_update_quantity(client, make_product):
    pid = await make_product(stock=10)
    added = await client.post("/api/cart", json={"sessionId": SESSION, "productId": pid, "quantity": 1})
    item_id = added.json()["items"][0]["cart_item_id"]

    resp = await client.put("/api/cart/update", json={"sessionId": SESSION, "cartItemId": item_id, "quantity": 7})
    assert resp.status_code == 200
    assert resp.json()["items"][0]["quantity"] == 7


@pytest.mark.asyncio
async def test_update_rechecks_stock(client, make_product):
    pid = await make_product(stock=3)
    added = await client.post("/api/cart", json={"sessionId": SESSION, "productId": pid, "quantity": 1})
    item_id = added.json()["items"][0]["cart_item_id"]

    resp = await client.put("/api/cart/update", json={"sessionId": SESSION, "cartItemId": item_id, "quantity": 4})
    assert resp.status_code == 400
    assert resp.json()["available"] == 3


@pytest.mark.asyncio
async def test_update_requires_positive_quantity(client, make_product):
    pid = await make_product()
    added = await client.post("/api/cart", json={"sessionId": SESSION, "productId": pid, "quantity": 1})
    item_id = added.json()["items"][0]["cart_item_id"]

    resp = await client.put("/api/cart/update", json={"sessionId": SESSION, "cartItemId": item_id, "quantity": -2})
    assert resp.status_code == 400

    resp = await client.put("/api/cart/update", json={"sessionId": SESSION, "cartItemId": item_id})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Quantity is required"


@pytest.mark.asyncio
async def test_update_foreign_item_is_404_and_untouched(client, make_product, fetch_all):
    pid = await make_product()
    added = await client.post("/api/cart", json={"sessionId": SESSION, "productId": pid, "quantity": 2})
    item_id = added.json()["items"][0]["cart_item_id"]

    resp = await client.put("/api/cart/update", json={"sessionId": OTHER, "cartItemId": item_id, "quantity": 9})
    assert resp.status_code == 404
    assert resp.json()["error"] == "Cart item not found or doesn't belong to session"

    rows = await fetch_all(select(CartItem.quantity))
    assert rows == [{"quantity": 2}]


@pytest.mark.asyncio
async def test_remove_item(client, make_product):
    first = await make_product(name="First")
    second = await make_product(name="Second")
    await client.post("/api/cart", json={"sessionId": SESSION, "productId": first, "quantity": 1})
    added = await client.post("/api/cart", json={"sessionId": SESSION, "productId": second, "quantity": 1})
    second_item = [i for i in added.json()["items"] if i["product_id"] == second][0]

    resp = await client.delete("/api/cart/remove", params={"sessionId": SESSION,
                                                          "cartItemId": second_item["cart_item_id"]})
    assert resp.status_code == 200
    assert [i["product_id"] for i in resp.json()["items"]] == [first]


@pytest.mark.asyncio
async def test_remove_foreign_item_keeps_row_count(client, make_product, fetch_all):
    pid = await make_product()
    added = await client.post("/api/cart", json={"sessionId": SESSION, "productId": pid, "quantity": 1})
    item_id = added.json()["items"][0]["cart_item_id"]

    resp = await client.delete("/api/cart/remove", params={"sessionId": OTHER, "cartItemId": item_id})
    assert resp.status_code == 404
    assert await _count_items(fetch_all) == 1


@pytest.mark.asyncio
async def test_remove_requires_item_id(client):
    resp = await client.delete("/api/cart/remove", params={"sessionId": SESSION})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Cart item ID is required"


@pytest.mark.asyncio
async def test_clear_empties_only_own_cart(client, make_product, fetch_all):
    pids = [await make_product(name=f"Model {n}") for n in range(3)]
    for pid in pids:
        await client.post("/api/cart", json={"sessionId": SESSION, "productId": pid, "quantity": 1})
    await client.post("/api/cart", json={"sessionId": OTHER, "productId": pids[0], "quantity": 1})

    resp = await client.request("DELETE", "/api/cart/clear", json={"sessionId": SESSION})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "removed": 3}

    resp = await client.get("/api/cart", params={"sessionId": SESSION})
    assert resp.json()["items"] == []

    resp = await client.get("/api/cart", params={"sessionId": OTHER})
    assert len(resp.json()["items"]) == 1


@pytest.mark.asyncio
async def test_clear_requires_session_id(client):
    resp = await client.request("DELETE", "/api/cart/clear", json={})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Session ID is required"


@pytest.mark.asyncio
async def test_cart_check_stock_reports_unavailable(client, make_product):
    plenty = await make_product(name="Plenty", stock=10)
    scarce = await make_product(name="Scarce", stock=1)

    resp = await client.post("/api/cart/check-stock", json={"items": [
        {"id": plenty, "quantity": 2},
        {"id": scarce, "quantity": 2},
    ]})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Some items are out of stock"
    assert [u["id"] for u in body["unavailableItems"]] == [scarce]
    assert body["unavailableItems"][0]["inStock"] == 1


@pytest.mark.asyncio
async def test_cart_check_stock_all_available(client, make_product):
    pid = await make_product(stock=10)
    resp = await client.post("/api/cart/check-stock", json={"items": [{"id": pid, "quantity": 3}]})
    assert resp.status_code == 200
    assert resp.json()["stockChecks"] == [{"id": pid, "available": True, "requested": 3, "inStock": 10}]

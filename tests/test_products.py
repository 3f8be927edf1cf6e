import pytest


@pytest.mark.asyncio
async def test_list_only_in_stock_products(client, make_product):
    in_stock = await make_product(name="Available", price="99.00", stock=3, description="Closed back")
    await make_product(name="Sold Out", stock=0)

    resp = await client.get("/api/products")
    assert resp.status_code == 200
    products = resp.json()["products"]
    assert [p["product_id"] for p in products] == [in_stock]
    assert products[0]["name"] == "Available"
    assert products[0]["description"] == "Closed back"
    assert products[0]["price"] == 99.0
    assert products[0]["stock_quantity"] == 3


@pytest.mark.asyncio
async def test_product_details(client, make_product):
    pid = await make_product(name="Detail", price="249.95", stock=0)
    resp = await client.get(f"/api/products/{pid}")
    assert resp.status_code == 200
    product = resp.json()["product"]
    assert product["name"] == "Detail"
    assert product["price"] == 249.95


@pytest.mark.asyncio
async def test_product_details_missing(client):
    resp = await client.get("/api/products/12345")
    assert resp.status_code == 404
    assert resp.json()["error"] == "Product not found"


@pytest.mark.asyncio
async def test_check_stock_available(client, make_product):
    pid = await make_product(stock=8)
    resp = await client.post("/api/products/check-stock", json={"id": pid, "quantity": 8})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "available": 8}


@pytest.mark.asyncio
async def test_check_stock_one_over_reports_actual_stock(client, make_product):
    pid = await make_product(name="Limited", stock=6)
    resp = await client.post("/api/products/check-stock", json={"id": pid, "quantity": 7})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Insufficient stock"
    assert body["available"] == 6
    assert body["requested"] == 7
    assert body["name"] == "Limited"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload, message", [
    ({"quantity": 1}, "Product ID is required"),
    ({"id": 1, "quantity": 0}, "Invalid quantity"),
    ({"id": 1}, "Invalid quantity"),
])
async def test_check_stock_validation(client, payload, message):
    resp = await client.post("/api/products/check-stock", json=payload)
    assert resp.status_code == 400
    assert resp.json()["error"] == message


@pytest.mark.asyncio
async def test_check_stock_unknown_product(client):
    resp = await client.post("/api/products/check-stock", json={"id": 777, "quantity": 1})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_malformed_body_is_400_with_fields(client):
    resp = await client.post("/api/products/check-stock", json={"id": "not-a-number", "quantity": 1})
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Invalid request"
    assert "id" in body["fields"]

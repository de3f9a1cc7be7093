import asyncio

from app.store import DataStore, StoreError
from conftest import SELLER_SIGNUP, BUYER_SIGNUP


def create(client, **overrides):
    body = {
        "name": "Kettle",
        "description": "1.7 l electric kettle",
        "category": "Kitchen",
        "price": "24.50",
        "stock": "8",
        "image_url": None,
        "seller_id": "s1",
        **overrides,
    }
    return client.post("/api/products", json=body)


def register_seller(client):
    r = client.post("/api/auth/sellers/register", json=SELLER_SIGNUP)
    assert r.status_code == 201, r.text
    return r.json()["id"]


def bulk_rows(n, category="Gadgets"):
    return [
        {"name": f"Item {i}", "description": f"Item {i} description", "category": category, "price": 1 + i}
        for i in range(n)
    ]


def test_create_and_list_products(client):
    r = create(client)
    assert r.status_code == 200
    product = r.json()["product"]
    assert r.json()["message"] == "Product created successfully"
    assert product["price"] == 24.5
    assert product["stock"] == 8

    create(client, name="Blender")
    create(client, name="Scarf", category="Fashion")

    listing = client.get("/api/products").json()
    assert listing["success"] is True
    assert listing["category"] == "all"
    assert [p["name"] for p in listing["products"]] == ["Scarf", "Blender", "Kettle"]
    assert listing["total"] == 3


def test_list_filters_and_pages(client):
    for name in ("A", "B", "C"):
        create(client, name=name)
    create(client, name="Scarf", category="Fashion")

    kitchen = client.get("/api/products", params={"category": "Kitchen"}).json()
    assert {p["name"] for p in kitchen["products"]} == {"A", "B", "C"}
    assert kitchen["category"] == "Kitchen"

    everything = client.get("/api/products", params={"category": "all"}).json()
    assert everything["total"] == 4

    page = client.get("/api/products", params={"limit": 2, "offset": 1}).json()
    assert [p["name"] for p in page["products"]] == ["C", "B"]


def test_create_requires_fields(client):
    r = client.post("/api/products", json={"name": "Kettle", "price": 3})
    assert r.status_code == 400
    assert r.json()["error"] == "Missing required fields: name, category, price, stock"


def test_bulk_upload_inserts_in_batches(client, monkeypatch):
    seller_id = register_seller(client)
    batches = []
    original_insert = DataStore.insert

    async def spy(self, table_name, rows):
        rows = list(rows)
        if table_name == "products":
            batches.append(len(rows))
        return await original_insert(self, table_name, rows)

    monkeypatch.setattr(DataStore, "insert", spy)

    r = client.post("/api/products/bulk-upload", json={"products": bulk_rows(150), "sellerId": seller_id})

    assert r.status_code == 200, r.text
    body = r.json()
    assert batches == [100, 50]
    assert body["count"] == 150
    assert body["seller_id"] == seller_id
    assert len({p["id"] for p in body["products"]}) == 150
    assert {p["name"] for p in body["products"]} == {f"Item {i}" for i in range(150)}
    assert all(p["stock"] == 10 and p["seller_id"] == seller_id for p in body["products"])


def test_bulk_upload_creates_missing_categories(client, session_maker):
    seller_id = register_seller(client)
    rows = bulk_rows(2, category=" Home & Garden ") + bulk_rows(1, category="Toys")

    r = client.post("/api/products/bulk-upload", json={"products": rows, "sellerId": seller_id})
    assert r.status_code == 200
    assert {p["category"] for p in r.json()["products"]} == {"Home & Garden", "Toys"}

    r = client.post("/api/products/bulk-upload", json={"products": bulk_rows(1, "Toys"), "sellerId": seller_id})
    assert r.status_code == 200

    async def categories():
        async with session_maker() as session:
            return await DataStore(session).select("product_categories", order_by=("name",))

    rows = asyncio.run(categories())
    assert [(c["name"], c["slug"]) for c in rows] == [("Home & Garden", "home-garden"), ("Toys", "toys")]


def test_bulk_upload_reports_every_bad_row(client):
    seller_id = register_seller(client)
    rows = bulk_rows(3)
    rows[0]["name"] = "  "
    rows[2]["price"] = 0
    del rows[2]["description"]

    r = client.post("/api/products/bulk-upload", json={"products": rows, "sellerId": seller_id})

    assert r.status_code == 400
    assert r.json() == {
        "error": "Validation failed",
        "details": [
            "Row 1: Name is required",
            "Row 3: Description is required",
            "Row 3: Price must be greater than 0",
        ],
    }
    assert client.get("/api/products").json()["total"] == 0


def test_bulk_upload_needs_products_and_seller(client):
    seller_id = register_seller(client)

    r = client.post("/api/products/bulk-upload", json={"products": [], "sellerId": seller_id})
    assert r.status_code == 400
    assert r.json()["error"] == "No products provided"

    r = client.post("/api/products/bulk-upload", json={"products": bulk_rows(1)})
    assert r.status_code == 400
    assert r.json()["error"] == "Seller ID is required"

    r = client.post("/api/products/bulk-upload", json={"products": bulk_rows(1), "sellerId": "not-a-seller"})
    assert r.status_code == 403


def test_bulk_upload_with_tokens(client):
    seller_id = register_seller(client)
    client.post("/api/auth/buyers/register", json=BUYER_SIGNUP)

    seller_token = client.post(
        "/api/auth/login", json={"email": SELLER_SIGNUP["email"], "password": "Secret123"}
    ).json()["access_token"]
    buyer_token = client.post(
        "/api/auth/login", json={"email": BUYER_SIGNUP["email"], "password": "Secret123"}
    ).json()["access_token"]

    r = client.post(
        "/api/products/bulk-upload",
        json={"products": bulk_rows(2)},
        headers={"Authorization": f"Bearer {seller_token}"},
    )
    assert r.status_code == 200
    assert r.json()["seller_id"] == seller_id

    r = client.post(
        "/api/products/bulk-upload",
        json={"products": bulk_rows(2), "sellerId": seller_id},
        headers={"Authorization": f"Bearer {buyer_token}"},
    )
    assert r.status_code == 403
    assert "not a seller" in r.json()["error"]


def test_failed_batch_stops_the_upload(client, monkeypatch):
    seller_id = register_seller(client)
    product_batches = []
    original_insert = DataStore.insert

    async def fail_second_batch(self, table_name, rows):
        rows = list(rows)
        if table_name == "products":
            product_batches.append(len(rows))
            if len(product_batches) == 2:
                raise StoreError("disk full")
        return await original_insert(self, table_name, rows)

    monkeypatch.setattr(DataStore, "insert", fail_second_batch)

    r = client.post("/api/products/bulk-upload", json={"products": bulk_rows(250), "sellerId": seller_id})

    assert r.status_code == 500
    assert r.json() == {"error": "Failed to insert products", "details": "disk full"}
    assert product_batches == [100, 100]
    listing = client.get("/api/products", params={"limit": 500}).json()
    assert listing["total"] == 100

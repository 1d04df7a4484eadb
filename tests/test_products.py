from conftest import auth

NEW_PRODUCT = {
    "name": "Chaqueta de Cuero",
    "category": "Hombre",
    "price": 1499.5,
    "stock": 7,
    "description": "Cuero genuino",
    "imageUrl": "https://example.com/jacket.png",
}


def test_list_seeded_products(client):
    r = client.get("/products")
    assert r.status_code == 200
    products = r.json()
    assert len(products) == 10
    assert [p["id"] for p in products] == sorted(p["id"] for p in products)
    first = products[0]
    assert first["name"] == "Vestido Rojo Seda"
    assert first["price"] == 599.0
    assert first["stock"] == 15
    assert "imageUrl" in first


def test_create_get_update_delete(client):
    r = client.post("/products", json=NEW_PRODUCT)
    assert r.status_code == 201
    created = r.json()
    assert created["price"] == 1499.5
    assert created["imageUrl"] == NEW_PRODUCT["imageUrl"]

    r = client.get(f"/products/{created['id']}")
    assert r.status_code == 200
    assert r.json()["name"] == "Chaqueta de Cuero"

    r = client.put(f"/products/{created['id']}", json=dict(NEW_PRODUCT, stock=3, price=999))
    assert r.status_code == 200
    assert r.json()["stock"] == 3
    assert r.json()["price"] == 999.0

    assert client.delete(f"/products/{created['id']}").status_code == 200
    assert client.get(f"/products/{created['id']}").status_code == 404


def test_price_and_stock_must_be_numeric(client):
    assert client.post("/products", json=dict(NEW_PRODUCT, price="abc")).status_code == 400
    assert client.post("/products", json=dict(NEW_PRODUCT, stock="many")).status_code == 400
    assert client.post("/products", json=dict(NEW_PRODUCT, stock=-1)).status_code == 400
    body = dict(NEW_PRODUCT)
    del body["price"]
    assert client.post("/products", json=body).status_code == 400


def test_unknown_product(client):
    assert client.get("/products/9999").status_code == 404
    assert client.put("/products/9999", json=NEW_PRODUCT).status_code == 404
    assert client.delete("/products/9999").status_code == 404


def test_deleting_product_keeps_order_snapshot(client, customer_token):
    order = client.post(
        "/orders", json={"items": [{"productId": 2, "quantity": 1}]}, headers=auth(customer_token)
    ).json()
    assert client.delete("/products/2").status_code == 200

    r = client.get(f"/orders/{order['id']}", headers=auth(customer_token))
    item = r.json()["items"][0]
    assert item["productId"] is None
    assert item["productName"] == "Blazer Negro Premium"
    assert item["productPrice"] == 899.0


def test_deleting_product_drops_cart_and_favorite_rows(client, customer_token):
    headers = auth(customer_token)
    client.post("/cart", json={"productId": 3, "quantity": 1}, headers=headers)
    client.post("/favorites", json={"productId": 3}, headers=headers)
    client.delete("/products/3")
    assert client.get("/cart", headers=headers).json() == []
    assert client.get("/favorites/ids", headers=headers).json() == []


def test_catalog_admin_switch(client, override_settings, customer_token, admin_token):
    override_settings(catalog_requires_admin=True)
    assert client.post("/products", json=NEW_PRODUCT).status_code == 401
    assert client.post("/products", json=NEW_PRODUCT, headers=auth(customer_token)).status_code == 403
    assert client.post("/products", json=NEW_PRODUCT, headers=auth(admin_token)).status_code == 201
    assert client.get("/products").status_code == 200


def test_root_and_health(client):
    assert client.get("/").json() == {"message": "VoidShop API running"}
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["database"] == "Connected"
    assert {"products", "orders", "order_items"} <= set(body["tables"])


def test_out_of_range_numbers_are_bad_requests(client):
    assert client.post("/products", json=dict(NEW_PRODUCT, stock=10**20)).status_code == 400
    assert client.post("/products", json=dict(NEW_PRODUCT, stock=2**31)).status_code == 400
    assert client.post("/products", json=dict(NEW_PRODUCT, price=10**9)).status_code == 400
    assert client.get(f"/products/{10**20}").status_code == 400
    assert client.get(f"/products/{-10**20}").status_code == 400

    r = client.post("/products", json=dict(NEW_PRODUCT, stock=2**31 - 1, price=99999999.99))
    assert r.status_code == 201
    assert r.json()["stock"] == 2**31 - 1

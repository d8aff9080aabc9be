# tests/test_products.py
MISSING_ID = "0123456789abcdef01234567"


def test_list_empty(auth_client):
    r = auth_client.get("/products")
    assert r.status_code == 200
    assert r.json() == []


def test_create_then_update_get_delete(auth_client):
    r = auth_client.post("/products", json={"name": "Laptop", "description": "14 inch", "price": 1500})
    assert r.status_code == 200
    created = r.json()
    pid = created["_id"]
    assert created["name"] == "Laptop"
    assert created["price"] == 1500

    r2 = auth_client.put(f"/products/{pid}", json={"price": 1399})
    assert r2.status_code == 200
    assert r2.json() == {"_id": pid, "name": "Laptop", "description": "14 inch", "price": 1399}

    assert auth_client.get(f"/products/{pid}").json()["price"] == 1399

    r3 = auth_client.delete(f"/products/{pid}")
    assert r3.status_code == 200
    assert r3.json()["_id"] == pid

    r4 = auth_client.delete(f"/products/{pid}")
    assert r4.status_code == 404
    assert r4.json() == {"message": "Product not found"}


def test_unsupplied_fields_are_not_written(auth_client):
    created = auth_client.post("/products", json={"name": "Mouse"}).json()
    assert set(created) == {"_id", "name"}


def test_update_missing_product(auth_client):
    r = auth_client.put(f"/products/{MISSING_ID}", json={"name": "x"})
    assert r.status_code == 404
    assert r.json() == {"message": "Product not found"}
    r2 = auth_client.get(f"/products/{MISSING_ID}")
    assert r2.status_code == 404


def test_malformed_id_is_an_internal_error(auth_client):
    for r in (
        auth_client.put("/products/not-an-id", json={"name": "x"}),
        auth_client.delete("/products/not-an-id"),
        auth_client.get("/products/not-an-id"),
    ):
        assert r.status_code == 500
        assert r.json() == {"message": "Internal Server Error"}


def test_invalid_body_is_rejected(auth_client):
    r = auth_client.post("/products", json={"name": "Mouse", "price": "cheap"})
    assert r.status_code == 422
    assert r.json()["message"] == "Invalid request"
    assert auth_client.get("/products").json() == []


def test_bulk_upload(auth_client):
    batch = [{"name": f"Item {i}", "price": i} for i in range(5)]
    r = auth_client.post("/products/bulk-upload", json=batch)
    assert r.status_code == 200
    created = r.json()
    assert len(created) == 5
    assert len({p["_id"] for p in created}) == 5
    assert [p["name"] for p in created] == [f"Item {i}" for i in range(5)]
    assert len(auth_client.get("/products").json()) == 5


def test_bulk_upload_with_bad_entry_inserts_nothing(auth_client):
    batch = [{"name": "ok", "price": 1}, {"name": "bad", "price": "free"}, {"name": "ok too"}]
    r = auth_client.post("/products/bulk-upload", json=batch)
    assert r.status_code == 500
    assert r.json() == {"message": "Internal Server Error"}
    assert auth_client.get("/products").json() == []


def test_bulk_upload_with_non_object_entry(auth_client):
    r = auth_client.post("/products/bulk-upload", json=[{"name": "ok"}, "oops"])
    assert r.status_code == 500
    assert auth_client.get("/products").json() == []


def test_bulk_upload_empty(auth_client):
    r = auth_client.post("/products/bulk-upload", json=[])
    assert r.status_code == 200
    assert r.json() == []

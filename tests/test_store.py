# tests/test_store.py
import asyncio

import pytest
from bson import ObjectId
from bson.errors import InvalidId
from fastapi.testclient import TestClient

from octa_api.database import InMemoryStore, Store, _to_query, _to_record
from octa_api.errors import InternalError, NotFound, store_operation
from octa_api.main import create_app
from conftest import make_settings


def run(coro):
    return asyncio.run(coro)


def test_create_assigns_object_ids():
    products = InMemoryStore().products
    a = run(products.create({"name": "a"}))
    b = run(products.create({"name": "b"}))
    assert ObjectId.is_valid(a["_id"])
    assert a["_id"] != b["_id"]


def test_none_filter_matches_missing_field():
    categories = InMemoryStore().categories
    run(categories.create({"cname": "top"}))
    run(categories.create({"cname": "explicit", "parentCategoryID": None}))
    run(categories.create({"cname": "child", "parentCategoryID": "x"}))
    found = run(categories.find({"parentCategoryID": None}))
    assert sorted(c["cname"] for c in found) == ["explicit", "top"]


def test_returned_records_are_copies():
    products = InMemoryStore().products
    created = run(products.create({"name": "a"}))
    created["name"] = "changed"
    assert run(products.find_by_id(created["_id"]))["name"] == "a"


def test_malformed_id_raises_invalid_id():
    products = InMemoryStore().products
    with pytest.raises(InvalidId):
        run(products.find_by_id("123"))
    with pytest.raises(InvalidId):
        run(products.find({"_id": "nope"}))


def test_insert_many_is_all_or_nothing():
    products = InMemoryStore().products
    with pytest.raises(TypeError):
        run(products.insert_many([{"name": "a"}, "b"]))
    assert run(products.find()) == []


def test_save_replaces_record():
    commissions = InMemoryStore().commissions
    created = run(commissions.create({"active": True, "commissionPercentage": 3}))
    run(commissions.save({"_id": created["_id"], "active": False}))
    assert run(commissions.find_by_id(created["_id"])) == {"_id": created["_id"], "active": False}


def test_mongo_helpers_convert_ids():
    oid = ObjectId()
    assert _to_query({"_id": str(oid), "x": 1}) == {"_id": oid, "x": 1}
    assert _to_record({"_id": oid, "x": 1}) == {"_id": str(oid), "x": 1}
    assert _to_record(None) is None
    with pytest.raises(InvalidId):
        _to_query({"_id": "bad"})


def test_store_operation_maps_failures():
    @store_operation
    async def broken():
        raise ConnectionError("store down")

    @store_operation
    async def missing():
        raise NotFound("Thing not found")

    with pytest.raises(InternalError):
        run(broken())
    with pytest.raises(NotFound):
        run(missing())


class UnreachableStore(Store):
    def collection(self, name):
        raise ConnectionError("no route to store")


def test_store_outage_is_a_500():
    app = create_app(make_settings(require_auth=False), store=UnreachableStore())
    with TestClient(app) as client:
        for r in (
            client.get("/products"),
            client.post("/categories", json={"cname": "x"}),
            client.get("/reviews"),
            client.post("/auth/login", json={"username": "a", "password": "b"}),
        ):
            assert r.status_code == 500
            assert r.json() == {"message": "Internal Server Error"}


def test_malformed_id_filter_fails_on_empty_collection():
    reviews = InMemoryStore().reviews
    with pytest.raises(InvalidId):
        run(reviews.find_one({"_id": "nope"}))
    with pytest.raises(InvalidId):
        run(reviews.find({"_id": 42}))

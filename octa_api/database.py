# octa_api/database.py
import copy
import logging
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import AsyncMongoClient, ReturnDocument

from .config import Settings

logger = logging.getLogger(__name__)

# This file holds the record store: one collection interface, two backends.

Record = Dict[str, Any]


def _object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise InvalidId(f"{value!r} is not a valid ObjectId")
    return ObjectId(value)


class Collection:
    """
    Async document collection. Records are plain dicts whose "_id" is a 24-hex string.
    Filters are simple equality maps; a None value matches a missing field too.
    """

    async def create(self, fields: Record) -> Record:
        raise NotImplementedError

    async def find_one(self, query: Record) -> Optional[Record]:
        raise NotImplementedError

    async def find(self, query: Optional[Record] = None) -> List[Record]:
        raise NotImplementedError

    async def find_by_id(self, record_id: str) -> Optional[Record]:
        raise NotImplementedError

    async def find_by_id_and_update(self, record_id: str, fields: Record) -> Optional[Record]:
        raise NotImplementedError

    async def find_by_id_and_delete(self, record_id: str) -> Optional[Record]:
        raise NotImplementedError

    async def insert_many(self, records: List[Record]) -> List[Record]:
        raise NotImplementedError

    async def save(self, record: Record) -> Record:
        raise NotImplementedError


class Store:
    async def close(self) -> None:
        pass

    def collection(self, name: str) -> Collection:
        raise NotImplementedError

    @property
    def users(self) -> Collection:
        return self.collection("users")

    @property
    def products(self) -> Collection:
        return self.collection("products")

    @property
    def categories(self) -> Collection:
        return self.collection("categories")

    @property
    def commissions(self) -> Collection:
        return self.collection("commissions")

    @property
    def reviews(self) -> Collection:
        return self.collection("reviews")


# ---------------------------
# In-memory backend
# ---------------------------
class InMemoryCollection(Collection):
    # Operations never await, so each one is atomic with respect to other requests.

    def __init__(self, name: str):
        self.name = name
        self._docs: Dict[str, Record] = {}

    @staticmethod
    def _normalise(query: Optional[Record]) -> Record:
        # a malformed id fails before any document is looked at
        query = dict(query or {})
        if "_id" in query:
            query["_id"] = str(_object_id(query["_id"]))
        return query

    @staticmethod
    def _matches(doc: Record, query: Record) -> bool:
        for key, expected in query.items():
            if key == "_id":
                if doc["_id"] != expected:
                    return False
            elif expected is None:
                if doc.get(key) is not None:
                    return False
            elif doc.get(key) != expected:
                return False
        return True

    async def create(self, fields: Record) -> Record:
        doc = copy.deepcopy(fields)
        doc["_id"] = str(ObjectId())
        self._docs[doc["_id"]] = doc
        return copy.deepcopy(doc)

    async def find_one(self, query: Record) -> Optional[Record]:
        query = self._normalise(query)
        for doc in self._docs.values():
            if self._matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def find(self, query: Optional[Record] = None) -> List[Record]:
        query = self._normalise(query)
        return [copy.deepcopy(d) for d in self._docs.values() if self._matches(d, query)]

    async def find_by_id(self, record_id: str) -> Optional[Record]:
        doc = self._docs.get(str(_object_id(record_id)))
        return copy.deepcopy(doc) if doc is not None else None

    async def find_by_id_and_update(self, record_id: str, fields: Record) -> Optional[Record]:
        doc = self._docs.get(str(_object_id(record_id)))
        if doc is None:
            return None
        updates = copy.deepcopy(fields)
        updates.pop("_id", None)
        doc.update(updates)
        return copy.deepcopy(doc)

    async def find_by_id_and_delete(self, record_id: str) -> Optional[Record]:
        return self._docs.pop(str(_object_id(record_id)), None)

    async def insert_many(self, records: List[Record]) -> List[Record]:
        docs = []
        for fields in records:
            if not isinstance(fields, dict):
                raise TypeError(f"{self.name}: cannot insert {type(fields).__name__}")
            doc = copy.deepcopy(fields)
            doc["_id"] = str(ObjectId())
            docs.append(doc)
        for doc in docs:
            self._docs[doc["_id"]] = doc
        return copy.deepcopy(docs)

    async def save(self, record: Record) -> Record:
        doc = copy.deepcopy(record)
        doc["_id"] = str(_object_id(doc["_id"])) if "_id" in doc else str(ObjectId())
        self._docs[doc["_id"]] = doc
        return copy.deepcopy(doc)


class InMemoryStore(Store):
    def __init__(self):
        self._collections: Dict[str, InMemoryCollection] = {}

    def collection(self, name: str) -> Collection:
        if name not in self._collections:
            self._collections[name] = InMemoryCollection(name)
        return self._collections[name]


# ---------------------------
# MongoDB backend
# ---------------------------
def _to_query(query: Optional[Record]) -> Record:
    query = dict(query or {})
    if "_id" in query:
        query["_id"] = _object_id(query["_id"])
    return query


def _to_record(doc: Optional[Record]) -> Optional[Record]:
    if doc is None:
        return None
    record = dict(doc)
    record["_id"] = str(record["_id"])
    return record


class MongoCollection(Collection):
    def __init__(self, collection):
        self._collection = collection

    async def create(self, fields: Record) -> Record:
        doc = {k: v for k, v in fields.items() if k != "_id"}
        await self._collection.insert_one(doc)
        return _to_record(doc)

    async def find_one(self, query: Record) -> Optional[Record]:
        return _to_record(await self._collection.find_one(_to_query(query)))

    async def find(self, query: Optional[Record] = None) -> List[Record]:
        cursor = self._collection.find(_to_query(query))
        return [_to_record(doc) async for doc in cursor]

    async def find_by_id(self, record_id: str) -> Optional[Record]:
        return _to_record(await self._collection.find_one({"_id": _object_id(record_id)}))

    async def find_by_id_and_update(self, record_id: str, fields: Record) -> Optional[Record]:
        updates = {k: v for k, v in fields.items() if k != "_id"}
        if not updates:
            return await self.find_by_id(record_id)
        doc = await self._collection.find_one_and_update(
            {"_id": _object_id(record_id)},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
        return _to_record(doc)

    async def find_by_id_and_delete(self, record_id: str) -> Optional[Record]:
        return _to_record(await self._collection.find_one_and_delete({"_id": _object_id(record_id)}))

    async def insert_many(self, records: List[Record]) -> List[Record]:
        docs = [{k: v for k, v in r.items() if k != "_id"} for r in records]
        if not docs:
            return []
        await self._collection.insert_many(docs)
        return [_to_record(doc) for doc in docs]

    async def save(self, record: Record) -> Record:
        oid = _object_id(record["_id"]) if "_id" in record else ObjectId()
        body = {k: v for k, v in record.items() if k != "_id"}
        await self._collection.replace_one({"_id": oid}, body, upsert=True)
        return _to_record({"_id": oid, **body})


class MongoStore(Store):
    def __init__(self, url: str, db_name: str):
        self._client = AsyncMongoClient(url)
        self._db = self._client[db_name]
        self._collections: Dict[str, MongoCollection] = {}

    def collection(self, name: str) -> Collection:
        if name not in self._collections:
            self._collections[name] = MongoCollection(self._db[name])
        return self._collections[name]

    async def close(self) -> None:
        await self._client.close()


def open_store(settings: Settings) -> Store:
    if settings.store_backend == "memory":
        logger.info("Using in-memory record store")
        return InMemoryStore()
    if settings.store_backend == "mongo":
        logger.info("Using MongoDB record store, database %s", settings.mongo_db)
        return MongoStore(settings.mongo_url, settings.mongo_db)
    raise ValueError(f"unknown STORE_BACKEND {settings.store_backend!r}")

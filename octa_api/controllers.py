# octa_api/controllers.py
import functools
import logging
from typing import Any, Dict, List, Optional

from .auth import TokenService, hash_password, verify_password
from .core import ProductIn, supplied_fields
from .database import Record, Store
from .errors import BadRequest, NotFound, Unauthorized, store_operation

logger = logging.getLogger(__name__)

# This file contains the logic behind every API endpoint: one store call per operation.


class ResourceController:
    def __init__(self, collection: str, label: str):
        self.collection = collection
        self.not_found = f"{label} not found"

    def _records(self, store: Store):
        return store.collection(self.collection)

    @store_operation
    async def list(self, store: Store, query: Optional[Record] = None) -> List[Record]:
        return await self._records(store).find(query or {})

    @store_operation
    async def create(self, store: Store, fields: Record) -> Record:
        return await self._records(store).create(fields)

    @store_operation
    async def get(self, store: Store, record_id: str) -> Record:
        record = await self._records(store).find_by_id(record_id)
        if record is None:
            raise NotFound(self.not_found)
        return record

    @store_operation
    async def update(self, store: Store, record_id: str, fields: Record) -> Record:
        record = await self._records(store).find_by_id_and_update(record_id, fields)
        if record is None:
            raise NotFound(self.not_found)
        return record

    @store_operation
    async def delete(self, store: Store, record_id: str) -> Record:
        record = await self._records(store).find_by_id_and_delete(record_id)
        if record is None:
            raise NotFound(self.not_found)
        return record


# ---------------------------
# Products
# ---------------------------
class ProductController(ResourceController):
    @store_operation
    async def bulk_upload(self, store: Store, payload: List[Any]) -> List[Record]:
        # validate the whole batch first so a bad entry inserts nothing
        records = [supplied_fields(ProductIn.model_validate(item)) for item in payload]
        return await self._records(store).insert_many(records)


# ---------------------------
# Categories
# ---------------------------
class ParentCategoryController(ResourceController):
    """Top-level categories: the ones whose parentCategoryID is null or missing."""

    @store_operation
    async def list(self, store: Store, query: Optional[Record] = None) -> List[Record]:
        return await self._records(store).find({**(query or {}), "parentCategoryID": None})

    @store_operation
    async def create(self, store: Store, fields: Record) -> Record:
        return await self._records(store).create({**fields, "parentCategoryID": None})


# ---------------------------
# Commissions
# ---------------------------
class CommissionController(ResourceController):
    @store_operation
    async def create(self, store: Store, fields: Record) -> Record:
        return await self._records(store).create({**fields, "active": True})

    @staticmethod
    def filter_query(record_id: Optional[str] = None, category: Optional[str] = None,
                     name: Optional[str] = None) -> Record:
        query: Record = {}
        if record_id:
            query["_id"] = record_id
        if category:
            query["parentCategoryID"] = category
        if name:
            # commissions have no name of their own
            logger.debug("Ignoring commission name filter %r", name)
        return query

    @store_operation
    async def toggle_status(self, store: Store, record_id: str) -> Dict[str, Any]:
        records = self._records(store)
        commission = await records.find_by_id(record_id)
        if commission is None:
            raise NotFound(self.not_found)
        commission["active"] = not commission.get("active", True)
        commission = await records.save(commission)
        return {"message": "Commission status toggled successfully", "commission": commission}

    async def history(self) -> Dict[str, str]:
        return {"message": "Commission history not implemented yet"}


# ---------------------------
# Reviews
# ---------------------------
class ReviewController(ResourceController):
    @store_operation
    async def respond(self, store: Store, review_id: str, response: Optional[str]) -> Record:
        records = self._records(store)
        review = await records.find_by_id(review_id)
        if review is None:
            raise NotFound(self.not_found)
        if response is not None:
            review["response"] = response
        return await records.save(review)


products = ProductController("products", "Product")
categories = ResourceController("categories", "Category")
parent_categories = ParentCategoryController("categories", "Parent category")
commissions = CommissionController("commissions", "Commission setting")
reviews = ReviewController("reviews", "Review")


# ---------------------------
# Users / sessions
# ---------------------------
@functools.lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    return hash_password("not-a-real-password", rounds)


@store_operation
async def login_logic(store: Store, tokens: TokenService, username: str, password: str,
                      rounds: int = 12) -> Dict[str, str]:
    user = await store.users.find_one({"username": username})
    # run bcrypt even for unknown users so both failures cost the same
    password_hash = user["password_hash"] if user else _dummy_hash(rounds)
    if not verify_password(password, password_hash) or user is None:
        logger.info("Failed login for %r", username)
        raise Unauthorized("Invalid credentials")
    logger.info("User %r logged in", username)
    return {"token": tokens.issue(user["_id"])}


@store_operation
async def register_logic(store: Store, username: str, password: str,
                         rounds: int = 12) -> Dict[str, str]:
    if await store.users.find_one({"username": username}) is not None:
        raise BadRequest("Username taken")
    user = await store.users.create({
        "username": username,
        "password_hash": hash_password(password, rounds),
    })
    logger.info("Registered user %r", username)
    return {"message": "User created", "userId": user["_id"]}

# octa_api/main.py
import logging
from contextlib import asynccontextmanager
from typing import Any, List, Optional

import uvicorn
from fastapi import APIRouter, Body, Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware

from . import controllers
from .auth import TokenService, authenticate, get_token_service, require_token
from .config import Settings, configure_logging
from .core import (
    LoginRequest, RegisterRequest, ProductIn, CategoryIn, ParentCategoryIn,
    CommissionIn, CommissionUpdate, ReviewIn, ReviewResponseIn, supplied_fields
)
from .database import Store, open_store
from .errors import install_error_handlers

logger = logging.getLogger(__name__)


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# ---------------------------
# Auth endpoints
# ---------------------------
auth_router = APIRouter(prefix="/auth")

@auth_router.post("/login")
async def login(payload: LoginRequest, store: Store = Depends(get_store),
                tokens: TokenService = Depends(get_token_service),
                settings: Settings = Depends(get_settings)):
    return await controllers.login_logic(
        store, tokens, payload.username, payload.password, settings.bcrypt_rounds
    )

@auth_router.post("/register", status_code=201)
async def register(payload: RegisterRequest, store: Store = Depends(get_store),
                   settings: Settings = Depends(get_settings)):
    return await controllers.register_logic(
        store, payload.username, payload.password, settings.bcrypt_rounds
    )

@auth_router.post("/logout")
async def logout():
    # tokens stay valid until they expire
    return {"message": "Logout successful"}

@auth_router.get("/session")
async def session_check(authorization: Optional[str] = Header(None),
                        tokens: TokenService = Depends(get_token_service)):
    return authenticate(tokens, authorization)


# Everything below needs a bearer token unless REQUIRE_AUTH is off.
resources = APIRouter(dependencies=[Depends(require_token)])

# ---------------------------
# Product endpoints
# ---------------------------
@resources.get("/products")
async def list_products(store: Store = Depends(get_store)):
    return await controllers.products.list(store)

@resources.post("/products")
async def create_product(payload: ProductIn, store: Store = Depends(get_store)):
    return await controllers.products.create(store, supplied_fields(payload))

@resources.post("/products/bulk-upload")
async def bulk_upload_products(payload: List[Any] = Body(...), store: Store = Depends(get_store)):
    return await controllers.products.bulk_upload(store, payload)

@resources.get("/products/{product_id}")
async def get_product(product_id: str, store: Store = Depends(get_store)):
    return await controllers.products.get(store, product_id)

@resources.put("/products/{product_id}")
async def update_product(product_id: str, payload: ProductIn, store: Store = Depends(get_store)):
    return await controllers.products.update(store, product_id, supplied_fields(payload))

@resources.delete("/products/{product_id}")
async def delete_product(product_id: str, store: Store = Depends(get_store)):
    return await controllers.products.delete(store, product_id)

# ---------------------------
# Category endpoints
# ---------------------------
@resources.get("/categories")
async def list_categories(store: Store = Depends(get_store)):
    return await controllers.categories.list(store)

@resources.post("/categories")
async def create_category(payload: CategoryIn, store: Store = Depends(get_store)):
    return await controllers.categories.create(store, supplied_fields(payload))

@resources.get("/categories/parent")
async def list_parent_categories(store: Store = Depends(get_store)):
    return await controllers.parent_categories.list(store)

@resources.post("/categories/parent")
async def create_parent_category(payload: ParentCategoryIn, store: Store = Depends(get_store)):
    return await controllers.parent_categories.create(store, supplied_fields(payload))

@resources.put("/categories/parent/{category_id}")
async def update_parent_category(category_id: str, payload: ParentCategoryIn,
                                 store: Store = Depends(get_store)):
    return await controllers.parent_categories.update(store, category_id, supplied_fields(payload))

@resources.delete("/categories/parent/{category_id}")
async def delete_parent_category(category_id: str, store: Store = Depends(get_store)):
    return await controllers.parent_categories.delete(store, category_id)

@resources.put("/categories/{category_id}")
async def update_category(category_id: str, payload: CategoryIn, store: Store = Depends(get_store)):
    return await controllers.categories.update(store, category_id, supplied_fields(payload))

@resources.delete("/categories/{category_id}")
async def delete_category(category_id: str, store: Store = Depends(get_store)):
    return await controllers.categories.delete(store, category_id)

# ---------------------------
# Commission endpoints
# ---------------------------
@resources.get("/commissions/products")
async def list_commissions(id: Optional[str] = None, category: Optional[str] = None,
                           name: Optional[str] = None, store: Store = Depends(get_store)):
    query = controllers.commissions.filter_query(id, category, name)
    return await controllers.commissions.list(store, query)

@resources.post("/commissions/products")
async def create_commission(payload: CommissionIn, store: Store = Depends(get_store)):
    return await controllers.commissions.create(store, supplied_fields(payload))

@resources.get("/commissions/products/{commission_id}")
async def get_commission(commission_id: str, store: Store = Depends(get_store)):
    return await controllers.commissions.get(store, commission_id)

@resources.put("/commissions/products/{commission_id}")
async def update_commission(commission_id: str, payload: CommissionUpdate,
                            store: Store = Depends(get_store)):
    return await controllers.commissions.update(store, commission_id, supplied_fields(payload))

@resources.delete("/commissions/products/{commission_id}")
async def delete_commission(commission_id: str, store: Store = Depends(get_store)):
    return await controllers.commissions.delete(store, commission_id)

@resources.get("/commissions/products/{commission_id}/history")
async def commission_history(commission_id: str):
    # placeholder: the id is accepted but not looked up
    return await controllers.commissions.history()

@resources.patch("/commissions/products/{commission_id}/status")
async def toggle_commission_status(commission_id: str, store: Store = Depends(get_store)):
    return await controllers.commissions.toggle_status(store, commission_id)

# ---------------------------
# Review endpoints
# ---------------------------
@resources.get("/reviews")
async def list_reviews(store: Store = Depends(get_store)):
    return await controllers.reviews.list(store)

@resources.post("/reviews")
async def create_review(payload: ReviewIn, store: Store = Depends(get_store)):
    return await controllers.reviews.create(store, supplied_fields(payload))

@resources.post("/reviews/respond")
async def respond_to_review(payload: ReviewResponseIn, store: Store = Depends(get_store)):
    return await controllers.reviews.respond(store, payload.reviewId, payload.response)


# ---------------------------
# App factory
# ---------------------------
def create_app(settings: Optional[Settings] = None, store: Optional[Store] = None,
               tokens: Optional[TokenService] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.store.close()

    app = FastAPI(title="octa-api", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store or open_store(settings)
    app.state.tokens = tokens or TokenService.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)
    app.include_router(auth_router)
    app.include_router(resources)
    if not settings.require_auth:
        logger.warning("REQUIRE_AUTH is off: resource routes accept unauthenticated requests")
    return app


def run():
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()

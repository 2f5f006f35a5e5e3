# app/api/v1/routers/products.py

from typing import Any, Dict, Optional
import time

from fastapi import APIRouter, Body, status

from app.api.deps import RepoDep, SessionDep, WriteCtxDep
from app.domain.models.product import Product
from app.domain.models.query import QueryOptions
from app.domain.services import product_svc

import logging
logger = logging.getLogger(__name__)

router = APIRouter(tags=["products"])


@router.post("/products", status_code=status.HTTP_201_CREATED, summary="Create a simple or variant-bearing product")
async def create_product(payload: Product, ctx: WriteCtxDep, repo: RepoDep):
    """
    Server sets id, createdAt/updatedAt, active=true and filter_price.
    The caller's API key must be authorized for the product's subdomain.
    """
    logger.info("Request: create_product identity=%s subdomain=%s", ctx.identity, payload.subdomain)
    product = await product_svc.create_product(repo, ctx, payload)
    return {"success": True, "message": "Product created successfully", "data": product.to_response()}


@router.get("/products/{product_id}")
async def get_product(product_id: str, session: SessionDep, repo: RepoDep):
    """Only products of the caller's own subdomain are visible."""
    logger.info("Request: get_product id=%s subdomain=%s", product_id, session.subdomain)
    product = await product_svc.get_product(repo, session, product_id)
    return {"success": True, "data": product.to_response()}


@router.post("/products/search", summary="List products of the caller's subdomain")
async def search_products(session: SessionDep, repo: RepoDep, options: Optional[QueryOptions] = None):
    """
    Filters on `subdomain` sent by the client are ignored; results are always
    scoped to the session's subdomain. No subdomain → empty list.
    """
    start_time = time.perf_counter()
    effective, products = await product_svc.list_products(repo, session, options or QueryOptions())

    elapsed_time = time.perf_counter() - start_time
    logger.info("Response: search_products subdomain=%s count=%s elapsed_time=%.4fs",
                session.subdomain, len(products), elapsed_time)
    return {
        "success": True,
        "count": len(products),
        "query": effective.model_dump(mode="json", by_alias=True),
        "data": [p.to_response() for p in products],
    }


@router.patch("/products/{product_id}")
async def update_product(product_id: str, ctx: WriteCtxDep, repo: RepoDep, patch: Dict[str, Any] = Body(...)):
    """Partial update. id, createdAt, subdomain, project_id and variations are silently dropped."""
    logger.info("Request: update_product id=%s identity=%s keys=%s", product_id, ctx.identity, sorted(patch))
    await product_svc.update_product(repo, ctx, product_id, patch)
    return {"success": True, "message": "Product updated successfully"}


@router.delete("/products/{product_id}")
async def delete_product(product_id: str, ctx: WriteCtxDep, repo: RepoDep):
    logger.info("Request: delete_product id=%s identity=%s", product_id, ctx.identity)
    await product_svc.delete_product(repo, ctx, product_id)
    return {"success": True, "message": "Product deactivated successfully"}

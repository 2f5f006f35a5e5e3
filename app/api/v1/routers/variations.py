# app/api/v1/routers/variations.py
from typing import Any, Dict

from fastapi import APIRouter, Body, status

from app.api.deps import RepoDep, WriteCtxDep
from app.domain.models.product import Variation
from app.domain.services import variation_svc

import logging
logger = logging.getLogger(__name__)

router = APIRouter(tags=["variations"])


@router.post("/products/{product_id}/variations", status_code=status.HTTP_201_CREATED)
async def create_variation(product_id: str, payload: Variation, ctx: WriteCtxDep, repo: RepoDep):
    """
    Append a variation. sku, price > 0 and attributes are required; the SKU must
    not already exist on the product, even on a deactivated variation.
    """
    logger.info("Request: create_variation product_id=%s sku=%s", product_id, payload.sku)
    variation = await variation_svc.create_variation(repo, ctx, product_id, payload)
    return {
        "success": True,
        "message": "Variation created successfully",
        "data": variation.model_dump(mode="json", by_alias=True, exclude_none=True),
    }


@router.patch("/products/{product_id}/variations/{variation_id}")
async def update_variation(
    product_id: str,
    variation_id: str,
    ctx: WriteCtxDep,
    repo: RepoDep,
    updates: Dict[str, Any] = Body(...),
):
    """Only price, stock and imageUrl are applied."""
    logger.info("Request: update_variation product_id=%s variation_id=%s", product_id, variation_id)
    variation = await variation_svc.update_variation(repo, ctx, product_id, variation_id, updates)
    return {
        "success": True,
        "message": "Variation updated successfully",
        "data": variation.model_dump(mode="json", by_alias=True, exclude_none=True),
    }


@router.delete("/products/{product_id}/variations/{variation_id}")
async def delete_variation(product_id: str, variation_id: str, ctx: WriteCtxDep, repo: RepoDep):
    logger.info("Request: delete_variation product_id=%s variation_id=%s", product_id, variation_id)
    await variation_svc.delete_variation(repo, ctx, product_id, variation_id)
    return {"success": True, "message": "Variation deactivated successfully"}

"""
Variation sub-resource.

Every operation loads the parent product, edits its variation list in memory
and writes the whole document back. Two concurrent edits on the same product
race; the last write wins.
"""
import logging
import math
from typing import Any, Dict, List, Tuple

from app.domain.errors import ConflictError, NotFoundError
from app.domain.models.product import Product, Variation
from app.domain.models.security import SecurityContext
from app.domain.repositories.product_repo import ProductRepo
from app.domain.services.permissions import require_subdomain
from app.domain.services.product_svc import load_product, new_variation_id, with_variations
from app.domain.services.product_validator import is_valid_price, validate_new_variation

logger = logging.getLogger(__name__)


def _find(product: Product, variation_id: str) -> Tuple[int, Variation]:
    for i, v in enumerate(product.variations):
        if v.id == variation_id:
            return i, v
    raise NotFoundError(f"No variation with id '{variation_id}' on product '{product.id}'.",
                        error="Variation not found")


def apply_variation_updates(variation: Variation, updates: Dict[str, Any]) -> Variation:
    """
    Apply only price, stock and imageUrl. Anything else in `updates`, and
    values of the wrong type (including NaN and infinities), are ignored.
    """
    changes: Dict[str, Any] = {}
    price = updates.get("price")
    if isinstance(price, (int, float)) and not isinstance(price, bool) and is_valid_price(price):
        changes["price"] = float(price)
    stock = updates.get("stock")
    if isinstance(stock, (int, float)) and not isinstance(stock, bool) and math.isfinite(stock):
        changes["stock"] = int(stock)
    image_url = updates.get("imageUrl")
    if isinstance(image_url, str):
        changes["image_url"] = image_url
    return variation.model_copy(update=changes)


async def _load_for_write(repo: ProductRepo, ctx: SecurityContext, product_id: str) -> Product:
    product = await load_product(repo, product_id)
    require_subdomain(ctx, product.subdomain, action="modify")
    return product


async def _persist(repo: ProductRepo, product: Product) -> None:
    if not await repo.save(product):
        raise NotFoundError(f"No product with id '{product.id}'.", error="Product not found")


async def create_variation(
    repo: ProductRepo, ctx: SecurityContext, product_id: str, payload: Variation
) -> Variation:
    product = await _load_for_write(repo, ctx, product_id)
    validate_new_variation(payload)

    # SKUs stay reserved after deactivation
    if any(v.sku == payload.sku for v in product.variations):
        raise ConflictError("A variation with this SKU already exists for this product.",
                            error="Duplicate variation SKU", extra={"variation_sku": payload.sku})

    variation = payload.model_copy(update={"id": new_variation_id(), "active": True})
    await _persist(repo, with_variations(product, [*product.variations, variation]))
    logger.info("variation created product_id=%s variation_id=%s sku=%s", product_id, variation.id, variation.sku)
    return variation


async def update_variation(
    repo: ProductRepo, ctx: SecurityContext, product_id: str, variation_id: str, updates: Dict[str, Any]
) -> Variation:
    product = await _load_for_write(repo, ctx, product_id)
    idx, current = _find(product, variation_id)

    updated = apply_variation_updates(current, updates)
    variations: List[Variation] = list(product.variations)
    variations[idx] = updated
    await _persist(repo, with_variations(product, variations))
    logger.info("variation updated product_id=%s variation_id=%s", product_id, variation_id)
    return updated


async def delete_variation(
    repo: ProductRepo, ctx: SecurityContext, product_id: str, variation_id: str
) -> None:
    """Soft delete in place: position in the list is kept."""
    product = await _load_for_write(repo, ctx, product_id)
    idx, current = _find(product, variation_id)

    variations: List[Variation] = list(product.variations)
    variations[idx] = current.model_copy(update={"active": False})
    await _persist(repo, with_variations(product, variations))
    logger.info("variation deactivated product_id=%s variation_id=%s", product_id, variation_id)

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from pydantic import ValidationError as PydanticValidationError

from app.domain.errors import NotFoundError, PermissionDeniedError, ValidationError
from app.domain.models.product import Product, Variation
from app.domain.models.query import QueryOptions
from app.domain.models.security import SecurityContext, SessionContext
from app.domain.repositories.product_repo import ProductRepo
from app.domain.services.filters import secure_query
from app.domain.services.permissions import require_subdomain
from app.domain.services.product_validator import compute_filter_price, is_valid_price, validate_product

logger = logging.getLogger(__name__)

# Never writable through the generic partial update
IMMUTABLE_FIELDS = frozenset({"_id", "id", "createdAt", "subdomain", "project_id", "variations"})
# Computed by the server on every write
SERVER_FIELDS = frozenset({"updatedAt", "filter_price"})
PRODUCT_WIRE_NAMES = Product.wire_names()


def new_product_id() -> str:
    return f"prod-{uuid.uuid4()}"


def new_variation_id() -> str:
    return f"var-{uuid.uuid4()}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def load_product(repo: ProductRepo, product_id: str) -> Product:
    product = await repo.get(product_id)
    if product is None:
        raise NotFoundError(f"No product with id '{product_id}'.", error="Product not found")
    return product


async def create_product(repo: ProductRepo, ctx: SecurityContext, payload: Product) -> Product:
    """
    Validate, check the target subdomain, then persist with server-set fields:
    id, timestamps, active=true, derived filter_price, and fresh ids on any
    inline variations.
    """
    validate_product(payload)
    require_subdomain(ctx, payload.subdomain, action="create")

    now = utcnow()
    variations = [
        v.model_copy(update={"id": new_variation_id(), "active": True})
        for v in payload.variations
    ]
    product = payload.model_copy(update={
        "id": new_product_id(),
        "variations": variations,
        "created_at": now,
        "updated_at": now,
        "active": True,
    })
    product = product.model_copy(update={"filter_price": compute_filter_price(product)})

    await repo.create(product)
    logger.info("product created id=%s subdomain=%s variations=%s filter_price=%s",
                product.id, product.subdomain, len(product.variations), product.filter_price)
    return product


async def get_product(repo: ProductRepo, session: SessionContext, product_id: str) -> Product:
    if not session.subdomain:
        raise PermissionDeniedError("Access denied. Subdomain context is required.")
    product = await load_product(repo, product_id)
    if product.subdomain != session.subdomain:
        logger.warning("cross-tenant read blocked id=%s caller_subdomain=%s", product_id, session.subdomain)
        raise PermissionDeniedError("You do not have permission to access this resource.")
    return product


async def list_products(
    repo: ProductRepo, session: SessionContext, options: QueryOptions
) -> Tuple[QueryOptions, List[Product]]:
    """
    Without a resolved subdomain nothing is listed (empty result, not an error).
    Otherwise the query is pinned to the caller's subdomain.
    """
    if not session.subdomain:
        logger.info("list_products without subdomain context: returning empty result")
        return options, []
    secured = secure_query(options, session.subdomain)
    products = await repo.query(secured)
    return secured, products


def _check_patch_value(key: str, value: Any) -> None:
    if key == "name" and (not isinstance(value, str) or not value):
        raise ValidationError("'name' must be a non-empty string.")
    if key == "price" and (isinstance(value, bool) or not isinstance(value, (int, float)) or not is_valid_price(value)):
        raise ValidationError("'price' must be a finite number greater than 0.")
    if key == "stock" and (isinstance(value, bool) or not isinstance(value, int)):
        raise ValidationError("'stock' must be an integer.")
    if key == "active" and not isinstance(value, bool):
        raise ValidationError("'active' must be a boolean.")


def sanitize_patch(patch: Dict[str, Any], current: Product) -> Dict[str, Any]:
    """
    Turn a client field map into the $set document actually written.
    - immutable and server-owned keys are dropped;
    - keys that are not product wire names are rejected (this covers nested
      paths, Mongo operators and Python-side names such as `image_url`);
    - the product as it would be stored is validated, so a patch can never
      leave an unreadable document behind.
    """
    writable = PRODUCT_WIRE_NAMES - IMMUTABLE_FIELDS - SERVER_FIELDS
    fields: Dict[str, Any] = {}
    for key, value in patch.items():
        if key in IMMUTABLE_FIELDS or key in SERVER_FIELDS:
            continue
        if key not in writable:
            raise ValidationError(f"Unknown or non-editable field '{key}'.")
        _check_patch_value(key, value)
        fields[key] = value

    if current.is_simple and "price" in fields:
        fields["filter_price"] = float(fields["price"])
    fields["updatedAt"] = utcnow()

    try:
        merged = Product.model_validate({**current.to_document(), **fields})
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in e.errors()
        )
        raise ValidationError(details) from e

    # write the normalized values (e.g. int price stored as float)
    stored = merged.model_dump(by_alias=True)
    return {key: stored[key] for key in fields}


async def update_product(
    repo: ProductRepo, ctx: SecurityContext, product_id: str, patch: Dict[str, Any]
) -> Dict[str, Any]:
    current = await load_product(repo, product_id)
    # guard on the stored subdomain, never on the payload
    require_subdomain(ctx, current.subdomain, action="modify")

    fields = sanitize_patch(patch, current)
    if not await repo.update(product_id, fields):
        raise NotFoundError(f"No product with id '{product_id}'.", error="Product not found")
    logger.info("product updated id=%s fields=%s", product_id, sorted(fields))
    return fields


async def delete_product(repo: ProductRepo, ctx: SecurityContext, product_id: str) -> None:
    """Soft delete: active=false."""
    current = await load_product(repo, product_id)
    require_subdomain(ctx, current.subdomain, action="modify")

    if not await repo.update(product_id, {"active": False, "updatedAt": utcnow()}):
        raise NotFoundError(f"No product with id '{product_id}'.", error="Product not found")
    logger.info("product deactivated id=%s", product_id)


def with_variations(product: Product, variations: List[Variation]) -> Product:
    """Replace the variation list, re-deriving filter_price and stamping updatedAt."""
    updated = product.model_copy(update={"variations": variations, "updated_at": utcnow()})
    return updated.model_copy(update={"filter_price": compute_filter_price(updated)})

from __future__ import annotations
import math
from typing import Optional, Sequence

from app.domain.errors import ValidationError
from app.domain.models.product import Product, Variation


def is_valid_price(price: Optional[float]) -> bool:
    """Finite and > 0. NaN fails every comparison, so test it explicitly."""
    return price is not None and math.isfinite(price) and price > 0


def validate_product(product: Product) -> None:
    """
    Check required fields for the product's mode.
    - Simple (no variations): name, sku, price > 0, project_id.
    - Variant-bearing: name, project_id, and sku + price > 0 on every variation.
    Raises ValidationError naming the first missing/invalid field.
    """
    if product.is_simple:
        if not product.name:
            raise ValidationError("Simple products require a non-empty 'name'.")
        if not product.sku:
            raise ValidationError("Simple products require a non-empty 'sku'.")
        if not is_valid_price(product.price):
            raise ValidationError("Simple products require 'price' greater than 0.")
        if not product.project_id:
            raise ValidationError("Simple products require a non-empty 'project_id'.")
        return

    if not product.name:
        raise ValidationError("Products with variations require a non-empty 'name'.")
    if not product.project_id:
        raise ValidationError("Products with variations require a non-empty 'project_id'.")
    for v in product.variations:
        if not v.sku or not is_valid_price(v.price):
            raise ValidationError(
                "Each variation requires a 'sku' and a 'price' greater than 0.",
                extra={"variation_sku": v.sku},
            )


def validate_new_variation(variation: Variation) -> None:
    if not variation.sku:
        raise ValidationError("Variations require a non-empty 'sku'.")
    if not is_valid_price(variation.price):
        raise ValidationError("Variations require 'price' greater than 0.")
    if not variation.attributes:
        raise ValidationError("Variations require at least one entry in 'attributes'.")


def min_variation_price(variations: Sequence[Variation]) -> float:
    # strict < keeps the first-encountered price on ties
    best = variations[0].price
    for v in variations[1:]:
        if v.price < best:
            best = v.price
    return best


def compute_filter_price(product: Product) -> float:
    """Simple → own price; variant-bearing → cheapest variation (active or not)."""
    if product.is_simple:
        return product.price or 0
    return min_variation_price(product.variations)

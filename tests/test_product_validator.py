import pytest
from pydantic import ValidationError as PydanticValidationError

from app.domain.errors import ValidationError
from app.domain.models.product import Product, Variation
from app.domain.services.product_validator import (
    compute_filter_price,
    is_valid_price,
    validate_new_variation,
    validate_product,
)


def _variant(sku, price, **kw):
    return Variation(sku=sku, price=price, attributes={"color": "red"}, **kw)


class TestValidateProduct:
    """Required fields per product mode"""

    def test_simple_product_ok(self):
        validate_product(Product(name="Shirt", sku="SH1", price=10, project_id="p1"))

    @pytest.mark.parametrize("field, overrides", [
        ("name", {"name": ""}),
        ("sku", {"sku": ""}),
        ("price", {"price": 0}),
        ("price", {"price": -3}),
        ("project_id", {"project_id": ""}),
    ])
    def test_simple_product_missing_field(self, field, overrides):
        data = {"name": "Shirt", "sku": "SH1", "price": 10, "project_id": "p1", **overrides}
        with pytest.raises(ValidationError) as exc:
            validate_product(Product(**data))
        assert field in exc.value.details

    def test_simple_product_without_price(self):
        with pytest.raises(ValidationError):
            validate_product(Product(name="Shirt", sku="SH1", project_id="p1"))

    def test_variant_product_does_not_need_own_sku_or_price(self):
        validate_product(Product(name="Shirt", project_id="p1", variations=[_variant("SH1-R", 12)]))

    def test_variant_product_requires_project_id(self):
        with pytest.raises(ValidationError) as exc:
            validate_product(Product(name="Shirt", variations=[_variant("SH1-R", 12)]))
        assert "project_id" in exc.value.details

    def test_variant_with_bad_price_reports_sku(self):
        product = Product(name="Shirt", project_id="p1",
                          variations=[_variant("SH1-R", 12), _variant("SH1-B", 0)])
        with pytest.raises(ValidationError) as exc:
            validate_product(product)
        assert exc.value.to_body()["variation_sku"] == "SH1-B"

    def test_variant_without_sku(self):
        with pytest.raises(ValidationError):
            validate_product(Product(name="Shirt", project_id="p1", variations=[_variant("", 5)]))


class TestFilterPrice:

    def test_simple_product_uses_own_price(self):
        assert compute_filter_price(Product(name="Shirt", sku="SH1", price=10, project_id="p1")) == 10

    def test_variant_product_uses_minimum(self):
        product = Product(name="Shirt", project_id="p1", price=99, variations=[
            _variant("A", 15), _variant("B", 7.5), _variant("C", 20),
        ])
        assert compute_filter_price(product) == 7.5

    def test_inactive_variations_still_count(self):
        product = Product(name="Shirt", project_id="p1", variations=[
            _variant("A", 15, active=True), _variant("B", 3, active=False),
        ])
        assert compute_filter_price(product) == 3

    def test_single_variation(self):
        product = Product(name="Shirt", project_id="p1", variations=[_variant("A", 42)])
        assert compute_filter_price(product) == 42


class TestValidateNewVariation:

    def test_ok(self):
        validate_new_variation(_variant("SH1-RED", 12))

    def test_requires_attributes(self):
        with pytest.raises(ValidationError) as exc:
            validate_new_variation(Variation(sku="SH1-RED", price=12))
        assert "attributes" in exc.value.details

    def test_requires_positive_price(self):
        with pytest.raises(ValidationError):
            validate_new_variation(_variant("SH1-RED", 0))

    def test_requires_sku(self):
        with pytest.raises(ValidationError):
            validate_new_variation(_variant("", 12))


class TestIsValidPrice:

    @pytest.mark.parametrize("price", [0.01, 1, 10.5])
    def test_positive_finite(self, price):
        assert is_valid_price(price)

    @pytest.mark.parametrize("price", [None, 0, -1, float("nan"), float("inf"), float("-inf")])
    def test_rejected(self, price):
        assert not is_valid_price(price)

    def test_model_refuses_non_finite_prices(self):
        with pytest.raises(PydanticValidationError):
            Product(name="Shirt", sku="SH1", price=float("nan"), project_id="p1")
        with pytest.raises(PydanticValidationError):
            Variation(sku="SH1-R", price=float("inf"))

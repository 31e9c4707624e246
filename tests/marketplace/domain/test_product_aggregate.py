"""Tests for the Product aggregate: creation, variant validation and updates."""

import pytest
from protean.exceptions import ValidationError

from marketplace.exceptions import AuthorizationError
from marketplace.product.events import ProductCreated, ProductDetailsUpdated, ProductVariantsReplaced
from marketplace.product.product import Product
from marketplace.product.resolver import resolve_variant


def _make_product(**overrides):
    defaults = {
        "vendor_id": "vendor-001",
        "name": "Linen Shirt",
        "brand": "Acme",
        "category": "Shirts",
        "base_price": 40.0,
        "options": [{"name": "Size", "values": ["S", "M"]}],
        "variants": [
            {"options": {"Size": "S"}, "stock": 10},
            {"options": {"Size": "M"}, "stock": 0},
        ],
    }
    defaults.update(overrides)
    return Product.create(**defaults)


class TestProductCreation:
    def test_create_keeps_variants_in_order(self):
        product = _make_product()
        assert [v.option_map for v in product.ordered_variants()] == [{"Size": "S"}, {"Size": "M"}]
        assert product.likes == 0
        assert product.is_active is True

    def test_create_raises_event(self):
        product = _make_product()
        events = [e for e in product._events if isinstance(e, ProductCreated)]
        assert len(events) == 1
        assert events[0].variant_count == 2

    def test_simple_product(self):
        product = _make_product(options=[], variants=[], stock=5)
        assert product.is_simple
        assert product.stock == 5

    def test_tags_are_deduplicated(self):
        product = _make_product(tags=["summer", "linen", "summer", " "])
        assert product.tag_list == ["summer", "linen"]

    def test_size_scenario_resolves_per_variant(self):
        data = _make_product().to_dict()
        assert resolve_variant(data, {"Size": "M"}).stock == 0
        assert not resolve_variant(data, {"Size": "M"}).purchasable
        assert resolve_variant(data, {"Size": "S"}).stock == 10


class TestVariantInvariants:
    def test_duplicate_combination_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _make_product(
                options=[{"name": "Color", "values": ["Red"]}, {"name": "Size", "values": ["M"]}],
                variants=[
                    {"options": {"Size": "M", "Color": "Red"}, "stock": 1},
                    {"options": {"Color": "Red", "Size": "M"}, "stock": 2},
                ],
            )
        assert "unique option combinations" in str(exc.value)

    def test_undeclared_option_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _make_product(variants=[{"options": {"Size": "S", "Material": "Wool"}, "stock": 1}])
        assert "Material" in str(exc.value)

    def test_empty_option_map_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_product(variants=[{"options": {}, "stock": 1}])

    def test_negative_variant_stock_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_product(variants=[{"options": {"Size": "S"}, "stock": -1}])

    def test_negative_base_price_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_product(base_price=-1.0)


class TestProductUpdates:
    def test_update_details_ignores_unset_values(self):
        product = _make_product()
        product._events.clear()
        product.update_details(name="Linen Shirt v2", brand=None)

        assert product.name == "Linen Shirt v2"
        assert product.brand == "Acme"
        assert isinstance(product._events[-1], ProductDetailsUpdated)

    def test_update_details_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            _make_product().update_details(vendor_id="someone-else")

    def test_replace_variants_adds_an_axis(self):
        product = _make_product()
        product._events.clear()
        product.replace_variants(
            [{"name": "Size", "values": ["S"]}, {"name": "Color", "values": ["Red", "Blue"]}],
            [
                {"options": {"Size": "S", "Color": "Red"}, "stock": 1},
                {"options": {"Size": "S", "Color": "Blue"}, "stock": 2},
            ],
        )
        assert len(product.variants) == 2
        assert product.color_values() == ["Red", "Blue"]
        assert isinstance(product._events[-1], ProductVariantsReplaced)

    def test_replace_variants_rejects_duplicates(self):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.replace_variants(
                [{"name": "Size", "values": ["S"]}],
                [{"options": {"Size": "S"}, "stock": 1}, {"options": {"Size": "S"}, "stock": 2}],
            )

    def test_all_media_lists_product_then_variant_images(self):
        product = _make_product(
            images=[{"url": "https://cdn.example.com/a.jpg", "public_id": "a"}],
            variants=[
                {
                    "options": {"Size": "S"},
                    "stock": 1,
                    "images": [{"url": "https://cdn.example.com/b.jpg", "public_id": "b"}],
                }
            ],
        )
        assert [m["public_id"] for m in product.all_media()] == ["a", "b"]


class TestOwnership:
    def test_owner_passes(self):
        _make_product().assert_owned_by("vendor-001")

    def test_other_vendor_is_rejected(self):
        with pytest.raises(AuthorizationError):
            _make_product().assert_owned_by("vendor-002", action="delete")


class TestLikesCounter:
    def test_unlike_never_goes_negative(self):
        product = _make_product()
        product.record_like()
        product.record_unlike()
        product.record_unlike()
        assert product.likes == 0

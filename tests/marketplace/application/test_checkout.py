"""Application tests for splitting a checkout into per-vendor orders."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from marketplace.exceptions import AuthorizationError
from marketplace.order.checkout import Checkout, CheckoutStatus, vendor_lookup
from marketplace.order.order import Order
from marketplace.product.creation import CreateProduct

ADDRESS = {"street": "1 Main St", "city": "Springfield", "postal_code": "12345", "country": "US"}


def _create_product(vendor_id, name, price=10.0):
    command = CreateProduct(vendor_id=vendor_id, name=name, brand="Acme", category="Misc", base_price=price, stock=5)
    return current_domain.process(command, asynchronous=False)


def _line(product_id, quantity=1, price=10.0, options=None):
    return {"product_id": product_id, "quantity": quantity, "price": price, "options": options or {}}


class TestCheckoutSplit:
    def test_one_order_per_vendor(self):
        a1 = _create_product("vendor-a", "A1")
        b1 = _create_product("vendor-b", "B1")
        a2 = _create_product("vendor-a", "A2")

        result = Checkout().place(
            [_line(a1, 2, 10.0), _line(b1, 1, 7.5), _line(a2, 3, 1.0, {"Size": "S"})],
            ADDRESS,
            user_id="user-001",
        )

        assert result.status == CheckoutStatus.COMPLETED
        assert len(result.orders) == 2
        by_vendor = {o["vendor_id"]: o for o in result.orders}
        assert [i["product_id"] for i in by_vendor["vendor-a"]["items"]] == [a1, a2]
        assert by_vendor["vendor-a"]["subtotal"] == 23.0
        assert by_vendor["vendor-a"]["total_amount"] == 23.0
        assert by_vendor["vendor-b"]["total_amount"] == 7.5
        assert all(o["status"] == "pending" for o in result.orders)

    def test_every_item_belongs_to_its_order_vendor(self):
        a1 = _create_product("vendor-a", "A1")
        b1 = _create_product("vendor-b", "B1")

        result = Checkout().place([_line(a1), _line(b1)], ADDRESS, guest_id="guest-001")

        for order in result.orders:
            assert {i["vendor_id"] for i in order["items"]} == {order["vendor_id"]}
            assert order["guest_id"] == "guest-001"

    def test_order_numbers_are_unique(self):
        a1 = _create_product("vendor-a", "A1")
        b1 = _create_product("vendor-b", "B1")

        first = Checkout().place([_line(a1), _line(b1)], ADDRESS, user_id="user-001")
        second = Checkout().place([_line(a1), _line(b1)], ADDRESS, user_id="user-001")

        numbers = [o["order_number"] for o in first.orders + second.orders]
        assert len(set(numbers)) == 4

    def test_missing_products_are_dropped_and_reported(self):
        a1 = _create_product("vendor-a", "A1")

        result = Checkout().place([_line("gone-001"), _line(a1)], ADDRESS, user_id="user-001")

        assert result.status == CheckoutStatus.COMPLETED
        assert result.dropped_product_ids == ["gone-001"]
        assert [i["product_id"] for i in result.orders[0]["items"]] == [a1]

    def test_all_products_missing(self):
        with pytest.raises(ObjectNotFoundError):
            Checkout().place([_line("gone-001")], ADDRESS, user_id="user-001")


class TestCheckoutPreconditions:
    def test_empty_checkout_is_rejected_before_anything_is_built(self):
        with pytest.raises(ValidationError):
            Checkout().place([], ADDRESS, user_id="user-001")
        assert current_domain.repository_for(Order)._dao.query.all().items == []

    def test_anonymous_checkout_is_rejected(self):
        a1 = _create_product("vendor-a", "A1")
        with pytest.raises(AuthorizationError):
            Checkout().place([_line(a1)], ADDRESS)
        assert current_domain.repository_for(Order)._dao.query.all().items == []

    def test_invalid_address_is_rejected(self):
        a1 = _create_product("vendor-a", "A1")
        with pytest.raises(ValidationError):
            Checkout().place([_line(a1)], {"street": "1 Main St"}, user_id="user-001")

    def test_anonymous_caller_is_rejected_before_items_are_checked(self):
        with pytest.raises(AuthorizationError):
            Checkout().place([], ADDRESS)
        with pytest.raises(AuthorizationError):
            Checkout().place([_line("prod-001", quantity="two")], ADDRESS)

    @pytest.mark.parametrize("quantity", [2.5, "two", None, True, 0])
    def test_bad_quantities_are_rejected(self, quantity):
        a1 = _create_product("vendor-a", "A1")
        with pytest.raises(ValidationError):
            Checkout().place([_line(a1, quantity=quantity)], ADDRESS, user_id="user-001")
        assert current_domain.repository_for(Order)._dao.query.all().items == []

    def test_non_numeric_price_is_rejected(self):
        a1 = _create_product("vendor-a", "A1")
        with pytest.raises(ValidationError):
            Checkout().place([_line(a1, price="cheap")], ADDRESS, user_id="user-001")

    def test_whole_number_float_quantity_is_accepted(self):
        a1 = _create_product("vendor-a", "A1")
        result = Checkout().place([_line(a1, quantity=2.0, price=5.0)], ADDRESS, user_id="user-001")
        assert result.orders[0]["items"][0]["quantity"] == 2
        assert result.orders[0]["subtotal"] == 10.0


class TestVendorLookup:
    def test_maps_existing_products_to_their_vendors(self):
        a1 = _create_product("vendor-a", "A1")
        b1 = _create_product("vendor-b", "B1")

        assert vendor_lookup([a1, "gone-001", a1, b1]) == {a1: "vendor-a", b1: "vendor-b"}

    def test_no_products(self):
        assert vendor_lookup([]) == {}


class TestPartialFailure:
    def _failing_for(self, vendor_id):
        def dispatch(command):
            if str(command.vendor_id) == vendor_id:
                raise RuntimeError("store unavailable")
            return current_domain.process(command, asynchronous=False)

        return dispatch

    def test_one_vendor_failing_is_partial(self):
        a1 = _create_product("vendor-a", "A1")
        b1 = _create_product("vendor-b", "B1")

        result = Checkout(dispatch=self._failing_for("vendor-b")).place(
            [_line(a1), _line(b1)], ADDRESS, user_id="user-001"
        )

        assert result.status == CheckoutStatus.PARTIAL
        assert [o["vendor_id"] for o in result.orders] == ["vendor-a"]
        assert result.failures[0].vendor_id == "vendor-b"
        assert result.failures[0].product_ids == [b1]
        assert "store unavailable" in result.failures[0].reason
        # The successful vendor order stays persisted
        assert len(current_domain.repository_for(Order)._dao.query.all().items) == 1

    def test_every_vendor_failing_is_failed(self):
        a1 = _create_product("vendor-a", "A1")

        result = Checkout(dispatch=self._failing_for("vendor-a")).place([_line(a1)], ADDRESS, user_id="user-001")

        assert result.status == CheckoutStatus.FAILED
        assert result.orders == []
        assert json.loads(json.dumps(result.to_dict()))["status"] == "failed"

"""Tests for the Order aggregate: totals, vendor ownership and the status workflow."""

import pytest
from protean import atomic_change
from protean.exceptions import ValidationError

from marketplace.exceptions import AuthorizationError
from marketplace.order.events import OrderPlaced, OrderStatusChanged
from marketplace.order.order import Order, OrderItem, OrderStatus

ADDRESS = {"street": "1 Main St", "city": "Springfield", "postal_code": "12345", "country": "US"}


def _make_order(**overrides):
    defaults = {
        "order_number": "MKT-1-1-abcdef",
        "vendor_id": "vendor-001",
        "lines": [
            {"product_id": "prod-001", "quantity": 2, "price": 10.0, "options": {"Size": "S"}},
            {"product_id": "prod-002", "quantity": 1, "price": 5.5},
        ],
        "shipping_address": ADDRESS,
        "user_id": "user-001",
    }
    defaults.update(overrides)
    return Order.create(**defaults)


class TestOrderCreation:
    def test_totals(self):
        order = _make_order()
        assert order.subtotal == 25.5
        assert order.tax == 0.0
        assert order.shipping_cost == 0.0
        assert order.total_amount == order.subtotal + order.tax + order.shipping_cost

    def test_starts_pending(self):
        assert _make_order().status == OrderStatus.PENDING.value

    def test_items_keep_input_order_and_snapshot_options(self):
        items = _make_order().ordered_items()
        assert [str(i.product_id) for i in items] == ["prod-001", "prod-002"]
        assert items[0].option_map == {"Size": "S"}
        assert items[0].size == "S"

    def test_signed_in_order_drops_guest_id(self):
        order = _make_order(guest_id="guest-001")
        assert order.guest_id is None

    def test_guest_order(self):
        order = _make_order(user_id=None, guest_id="guest-001")
        assert order.belongs_to(guest_id="guest-001")

    def test_raises_order_placed(self):
        assert any(isinstance(e, OrderPlaced) for e in _make_order()._events)

    def test_order_needs_a_customer(self):
        with pytest.raises(ValidationError):
            _make_order(user_id=None, guest_id=None)

    def test_missing_address_fields_are_rejected(self):
        with pytest.raises(ValidationError):
            _make_order(shipping_address={"street": "1 Main St"})


class TestVendorInvariant:
    def test_item_of_another_vendor_is_rejected(self):
        order = _make_order()
        with pytest.raises(ValidationError) as exc:
            with atomic_change(order):
                order.add_items(OrderItem(product_id="prod-009", vendor_id="vendor-002", quantity=1, price=1.0))
        assert "order's vendor" in str(exc.value)


class TestStatusWorkflow:
    def test_vendor_sets_status(self):
        order = _make_order()
        order._events.clear()
        order.set_status("shipped", "vendor-001")

        assert order.status == "shipped"
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "pending"

    def test_unknown_status_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_order().set_status("lost", "vendor-001")

    def test_pending_is_not_settable(self):
        with pytest.raises(ValidationError):
            _make_order().set_status("pending", "vendor-001")

    def test_unrelated_vendor_is_rejected(self):
        order = _make_order()
        with pytest.raises(AuthorizationError):
            order.set_status("confirmed", "vendor-002")
        assert order.status == "pending"

    def test_free_form_transitions_by_default(self):
        order = _make_order()
        order.set_status("delivered", "vendor-001")
        order.set_status("confirmed", "vendor-001")
        assert order.status == "confirmed"

    def test_forward_only_when_enforced(self):
        order = _make_order()
        order.set_status("confirmed", "vendor-001", enforce_forward=True)
        order.set_status("processing", "vendor-001", enforce_forward=True)
        with pytest.raises(ValidationError):
            order.set_status("confirmed", "vendor-001", enforce_forward=True)

    def test_terminal_states_when_enforced(self):
        order = _make_order()
        order.set_status("cancelled", "vendor-001", enforce_forward=True)
        with pytest.raises(ValidationError):
            order.set_status("confirmed", "vendor-001", enforce_forward=True)

"""Order aggregate: one vendor's share of a customer checkout.

A checkout that spans several vendors produces one Order per vendor; every
item of an order belongs to that order's vendor. The vendor then moves the
order through its status workflow.

State Machine:
    pending → confirmed → processing → shipped → out_for_delivery → delivered
    cancelled (from any non-terminal state)
    delivered and cancelled are terminal

By default any settable status may be applied (vendors correct mistakes by
setting an earlier status); with ``enforce_forward`` only the transitions
above are allowed.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from marketplace.domain import marketplace
from marketplace.exceptions import AuthorizationError
from marketplace.order.events import OrderPlaced, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Statuses a vendor may set; orders start out pending
SETTABLE_STATUSES = {s for s in OrderStatus if s != OrderStatus.PENDING}

_FORWARD_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def parse_status(value):
    """Settable status for ``value``; ValidationError for anything else."""
    try:
        status = OrderStatus(value)
    except ValueError:
        status = None
    if status not in SETTABLE_STATUSES:
        raise ValidationError({"status": ["Invalid status"]})
    return status


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, captured at checkout and never changed afterwards."""

    full_name = String(max_length=150)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(max_length=30)

    def to_dict(self):
        return {
            "full_name": self.full_name,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
            "phone": self.phone,
        }


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderItem:
    """A checkout line with the price the customer saw and a snapshot of the selected options."""

    product_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    options = Text()  # JSON: {option name: value}
    size = String(max_length=50)
    line_number = Integer(default=0)

    @property
    def option_map(self):
        return json.loads(self.options) if self.options else {}

    @property
    def line_total(self):
        return self.price * self.quantity

    def to_dict(self):
        return {
            "product_id": str(self.product_id),
            "vendor_id": str(self.vendor_id),
            "quantity": self.quantity,
            "price": self.price,
            "options": self.option_map,
            "size": self.size,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    order_number = String(required=True, max_length=64, unique=True)
    user_id = Identifier()  # Nullable for guest orders
    guest_id = String(max_length=255)
    vendor_id = Identifier(required=True)
    items = HasMany(OrderItem)
    subtotal = Float(default=0.0)
    tax = Float(default=0.0)
    shipping_cost = Float(default=0.0)
    total_amount = Float(default=0.0)
    shipping_address = ValueObject(ShippingAddress)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def items_must_belong_to_order_vendor(self):
        for item in self.items:
            if str(item.vendor_id) != str(self.vendor_id):
                raise ValidationError({"items": ["Every item must belong to the order's vendor"]})

    @invariant.post
    def order_must_have_a_customer(self):
        if not self.user_id and not self.guest_id:
            raise ValidationError({"order": ["An order needs a user or a guest"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, order_number, vendor_id, lines, shipping_address, user_id=None, guest_id=None):
        """Build one vendor's order from checkout lines, in the order given.

        Args:
            lines: List of dicts with product_id, quantity, price and options.
            shipping_address: Dict with the ShippingAddress fields.
        """
        now = datetime.now(UTC)
        subtotal = sum(line["price"] * line["quantity"] for line in lines)
        tax = 0.0  # Placeholder until tax rules exist
        shipping_cost = 0.0  # Placeholder until shipping rates exist

        order = cls(
            order_number=order_number,
            user_id=user_id,
            # A signed-in customer's order belongs to the user, not the browser session
            guest_id=None if user_id else guest_id,
            vendor_id=vendor_id,
            subtotal=subtotal,
            tax=tax,
            shipping_cost=shipping_cost,
            total_amount=subtotal + tax + shipping_cost,
            shipping_address=ShippingAddress(**shipping_address),
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        with atomic_change(order):
            for number, line in enumerate(lines):
                options = line.get("options") or {}
                order.add_items(
                    OrderItem(
                        product_id=line["product_id"],
                        vendor_id=vendor_id,
                        quantity=line["quantity"],
                        price=line["price"],
                        options=json.dumps(options),
                        size=options.get("Size") or options.get("size"),
                        line_number=number,
                    )
                )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                vendor_id=str(vendor_id),
                user_id=str(user_id) if user_id else None,
                guest_id=order.guest_id,
                item_count=len(lines),
                total_amount=order.total_amount,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def ordered_items(self):
        return sorted(self.items, key=lambda i: i.line_number or 0)

    def involves_vendor(self, vendor_id):
        return vendor_id is not None and any(str(i.vendor_id) == str(vendor_id) for i in self.items)

    def belongs_to(self, user_id=None, guest_id=None):
        if user_id and self.user_id:
            return str(self.user_id) == str(user_id)
        if guest_id and self.guest_id:
            return self.guest_id == guest_id
        return False

    def to_dict(self):
        return {
            "id": str(self.id),
            "order_number": self.order_number,
            "user_id": str(self.user_id) if self.user_id else None,
            "guest_id": self.guest_id,
            "vendor_id": str(self.vendor_id),
            "items": [i.to_dict() for i in self.ordered_items()],
            "subtotal": self.subtotal,
            "tax": self.tax,
            "shipping_cost": self.shipping_cost,
            "total_amount": self.total_amount,
            "shipping_address": self.shipping_address.to_dict() if self.shipping_address else None,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    # -------------------------------------------------------------------
    # Status workflow
    # -------------------------------------------------------------------
    def set_status(self, new_status, acting_vendor_id, enforce_forward=False):
        target = parse_status(new_status)
        if not self.involves_vendor(acting_vendor_id):
            raise AuthorizationError("Forbidden: You are not associated with this order")

        current = OrderStatus(self.status)
        if enforce_forward and target not in _FORWARD_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot move order from {current.value} to {target.value}"]})

        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                vendor_id=str(acting_vendor_id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )

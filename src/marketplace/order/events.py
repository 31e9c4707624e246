"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """One vendor's order was created from a checkout."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    vendor_id = Identifier(required=True)
    user_id = Identifier()
    guest_id = String()
    item_count = Integer(required=True)
    total_amount = Float(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    """The vendor moved the order to another status."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    vendor_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)

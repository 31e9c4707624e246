"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="ShoppingCart")
class CartLineAdded:
    """A product selection was added to a saved cart, or its quantity grew."""

    __version__ = 1

    cart_id = Identifier(required=True)
    line_id = String(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@marketplace.event(part_of="ShoppingCart")
class CartLineQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    line_id = String(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@marketplace.event(part_of="ShoppingCart")
class CartLineOptionsChanged:
    """A line switched to another variant of the same product."""

    __version__ = 1

    cart_id = Identifier(required=True)
    previous_line_id = String(required=True)
    line_id = String(required=True)
    options = Text()  # JSON: {option name: value}


@marketplace.event(part_of="ShoppingCart")
class CartLineRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    line_id = String(required=True)


@marketplace.event(part_of="ShoppingCart")
class CartCleared:
    __version__ = 1

    cart_id = Identifier(required=True)

"""Saved cart line management: commands and handler.

Every command names the cart owner (``user_id`` or ``guest_id``); the cart is
created on the first addition.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.cart.cart import ShoppingCart
from marketplace.domain import marketplace
from marketplace.product.product import Product


@marketplace.command(part_of="ShoppingCart")
class AddToCart:
    user_id = Identifier()
    guest_id = String(max_length=255)
    product_id = Identifier(required=True)
    options = Text()  # JSON: {option name: value}
    quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    user_id = Identifier()
    guest_id = String(max_length=255)
    line_id = String(required=True, max_length=500)
    quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="ShoppingCart")
class ChangeCartLineOptions:
    user_id = Identifier()
    guest_id = String(max_length=255)
    line_id = String(required=True, max_length=500)
    options = Text()  # JSON: {option name: value}


@marketplace.command(part_of="ShoppingCart")
class RemoveFromCart:
    user_id = Identifier()
    guest_id = String(max_length=255)
    line_id = String(required=True, max_length=500)


@marketplace.command(part_of="ShoppingCart")
class ClearCart:
    user_id = Identifier()
    guest_id = String(max_length=255)


def find_cart(user_id=None, guest_id=None):
    """The saved cart of a user or guest, or ``None``."""
    repo = current_domain.repository_for(ShoppingCart)
    if user_id:
        carts = repo._dao.query.filter(user_id=str(user_id)).all().items
    elif guest_id:
        carts = repo._dao.query.filter(guest_id=guest_id).all().items
    else:
        raise ValidationError({"cart": ["A user or guest id is required"]})
    return repo.get(carts[0].id) if carts else None


def _require_cart(command):
    cart = find_cart(command.user_id, command.guest_id)
    if cart is None:
        raise ObjectNotFoundError("Cart not found")
    return cart


def _catalogue_product(product_id):
    product = current_domain.repository_for(Product).get(product_id)
    if not product.is_active:
        raise ValidationError({"product_id": ["Product is not available"]})
    return product.to_dict()


@marketplace.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = find_cart(command.user_id, command.guest_id)
        if cart is None:
            cart = ShoppingCart.create(user_id=command.user_id, guest_id=command.guest_id)
        cart.add_line(
            _catalogue_product(command.product_id),
            options=json.loads(command.options) if command.options else {},
            quantity=command.quantity,
        )
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        cart = _require_cart(command)
        cart.update_line_quantity(command.line_id, command.quantity)
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(ChangeCartLineOptions)
    def change_line_options(self, command):
        cart = _require_cart(command)
        line = next((line for line in cart.lines() if line.line_id == command.line_id), None)
        if line is None:
            raise ValidationError({"line_id": ["Line not found in cart"]})
        cart.change_line_options(
            command.line_id,
            _catalogue_product(line.product_id),
            json.loads(command.options) if command.options else {},
        )
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = _require_cart(command)
        cart.remove_line(command.line_id)
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = _require_cart(command)
        cart.clear()
        current_domain.repository_for(ShoppingCart).add(cart)

"""Saved shopping cart: one per signed-in user or guest.

Lines are keyed by their line id (product plus sorted option selection), so
adding the same selection twice grows the existing line instead of creating
a second one. Prices are resolved when a line is added or its variant changes.
"""

import json
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from marketplace.cart.events import (
    CartCleared,
    CartLineAdded,
    CartLineOptionsChanged,
    CartLineQuantityUpdated,
    CartLineRemoved,
)
from marketplace.cart.lines import CartLine, build_line, compute_line_id, update_line_options
from marketplace.domain import marketplace


@marketplace.entity(part_of="ShoppingCart")
class CartItem:
    line_id = String(required=True, max_length=500)
    product_id = Identifier(required=True)
    name = String(max_length=255)
    options = Text()  # JSON: {option name: value}
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    image = Text()  # JSON: {url, public_id} or null
    position = Integer(default=0)

    def to_line(self):
        return CartLine(
            line_id=self.line_id,
            product_id=str(self.product_id),
            quantity=self.quantity,
            price=self.price,
            options=json.loads(self.options) if self.options else {},
            image=json.loads(self.image) if self.image else None,
            name=self.name,
        )


@marketplace.aggregate
class ShoppingCart:
    user_id = Identifier()  # Nullable for guest carts
    guest_id = String(max_length=255)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_must_have_exactly_one_owner(self):
        if bool(self.user_id) == bool(self.guest_id):
            raise ValidationError({"cart": ["A cart belongs to either a user or a guest"]})

    @classmethod
    def create(cls, user_id=None, guest_id=None):
        now = datetime.now(UTC)
        return cls(user_id=user_id, guest_id=guest_id, created_at=now, updated_at=now)

    def lines(self):
        return [item.to_line() for item in sorted(self.items, key=lambda i: i.position or 0)]

    def _find(self, line_id):
        return next((i for i in self.items if i.line_id == line_id), None)

    def _rewrite(self, lines):
        with atomic_change(self):
            for existing in list(self.items):
                self.remove_items(existing)
            for position, line in enumerate(lines):
                self.add_items(_item_from_line(line, position))
            self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_line(self, product, options=None, quantity=1):
        """Add a selection of ``product`` (catalogue dict), merging with an equal line."""
        line = build_line(product, options, quantity)
        existing = self._find(line.line_id)
        if existing:
            existing.quantity += quantity
            total = existing.quantity
        else:
            position = max((i.position or 0 for i in self.items), default=-1) + 1
            self.add_items(_item_from_line(line, position))
            total = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartLineAdded(
                cart_id=str(self.id),
                line_id=line.line_id,
                product_id=line.product_id,
                quantity=total,
            )
        )

    def update_line_quantity(self, line_id, new_quantity):
        if new_quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        item = self._find(line_id)
        if item is None:
            raise ValidationError({"line_id": ["Line not found in cart"]})

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartLineQuantityUpdated(
                cart_id=str(self.id),
                line_id=line_id,
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def change_line_options(self, line_id, product, new_options):
        """Switch a line to another variant; the line id follows the new selection."""
        lines = update_line_options(self.lines(), line_id, product, new_options)
        self._rewrite(lines)

        new_id = compute_line_id(product["id"], new_options)
        self.raise_(
            CartLineOptionsChanged(
                cart_id=str(self.id),
                previous_line_id=line_id,
                line_id=new_id,
                options=json.dumps(dict(new_options or {})),
            )
        )

    def remove_line(self, line_id):
        item = self._find(line_id)
        if item is None:
            raise ValidationError({"line_id": ["Line not found in cart"]})
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartLineRemoved(cart_id=str(self.id), line_id=line_id))

    def remove_product(self, product_id):
        """Drop every line of ``product_id``; returns how many were removed."""
        doomed = [i for i in self.items if str(i.product_id) == str(product_id)]
        for item in doomed:
            self.remove_items(item)
            self.raise_(CartLineRemoved(cart_id=str(self.id), line_id=item.line_id))
        if doomed:
            self.updated_at = datetime.now(UTC)
        return len(doomed)

    def clear(self):
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(cart_id=str(self.id)))

    @property
    def total(self):
        return sum(item.price * item.quantity for item in self.items)

    def to_dict(self):
        return {
            "id": str(self.id),
            "user_id": str(self.user_id) if self.user_id else None,
            "guest_id": self.guest_id,
            "items": [
                {
                    "line_id": line.line_id,
                    "product_id": line.product_id,
                    "name": line.name,
                    "options": line.options,
                    "quantity": line.quantity,
                    "price": line.price,
                    "image": line.image,
                }
                for line in self.lines()
            ],
            "total": self.total,
        }


def _item_from_line(line, position):
    return CartItem(
        line_id=line.line_id,
        product_id=line.product_id,
        name=line.name,
        options=json.dumps(line.options),
        quantity=line.quantity,
        price=line.price,
        image=json.dumps(line.image) if line.image else None,
        position=position,
    )

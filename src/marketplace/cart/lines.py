"""Cart lines: identity, pricing and the client-side cart container.

A cart line is a product plus an option selection. Two selections that differ
only in key order are the same line, so lines are keyed by ``compute_line_id``.
"""

from dataclasses import dataclass, field, replace

from protean.exceptions import ValidationError

from marketplace.product.resolver import ResolutionStatus, resolve_variant


def compute_line_id(product_id, options=None):
    """``product_id`` alone, or suffixed with ``_key-value`` pairs sorted by key."""
    if not options:
        return str(product_id)
    suffix = "_".join(f"{key}-{options[key]}" for key in sorted(options))
    return f"{product_id}_{suffix}"


@dataclass(frozen=True)
class CartLine:
    line_id: str
    product_id: str
    quantity: int
    price: float
    options: dict = field(default_factory=dict)
    image: dict | None = None
    name: str | None = None

    @property
    def line_total(self):
        return self.price * self.quantity


def _resolve_for_cart(product, options):
    resolution = resolve_variant(product, options)
    if resolution.status == ResolutionStatus.INCOMPLETE_SELECTION:
        raise ValidationError({"options": ["Select a value for every option"]})
    if resolution.status == ResolutionStatus.NOT_FOUND:
        raise ValidationError({"options": ["Selected combination is not available"]})
    if not resolution.purchasable:
        raise ValidationError({"options": ["Selected item is out of stock"]})
    return resolution


def build_line(product, options=None, quantity=1):
    """Price a new line from the catalogue representation of ``product``."""
    if quantity < 1:
        raise ValidationError({"quantity": ["Quantity must be at least 1"]})
    options = dict(options or {})
    resolution = _resolve_for_cart(product, options)
    return CartLine(
        line_id=compute_line_id(product["id"], options),
        product_id=str(product["id"]),
        quantity=quantity,
        price=resolution.price,
        options=options,
        image=resolution.image,
        name=product.get("name"),
    )


def update_line_options(lines, line_id, product, new_options):
    """Re-resolve the line ``line_id`` with ``new_options``.

    Quantity is kept and the old line id is replaced in place. When the new
    selection matches another existing line, the two lines are merged.
    """
    current = next((line for line in lines if line.line_id == line_id), None)
    if current is None:
        raise ValidationError({"line_id": ["Line not found in cart"]})

    new_options = dict(new_options or {})
    resolution = _resolve_for_cart(product, new_options)
    new_id = compute_line_id(current.product_id, new_options)
    updated = replace(
        current,
        line_id=new_id,
        options=new_options,
        price=resolution.price,
        image=resolution.image or current.image,
    )

    existing = next((line for line in lines if line.line_id == new_id and line.line_id != line_id), None)
    result = []
    for line in lines:
        if line.line_id == line_id:
            if existing is None:
                result.append(updated)
        elif existing is not None and line.line_id == new_id:
            result.append(replace(updated, quantity=line.quantity + current.quantity))
        else:
            result.append(line)
    return result


class CartState:
    """In-process cart for clients; the same rules as the saved cart, no persistence.

    Create one per shopper session and pass it to whatever composes the cart.
    """

    def __init__(self, lines=None):
        self._lines = list(lines or [])

    @property
    def lines(self):
        return list(self._lines)

    def get(self, line_id):
        return next((line for line in self._lines if line.line_id == line_id), None)

    def add(self, product, options=None, quantity=1):
        line = build_line(product, options, quantity)
        existing = self.get(line.line_id)
        if existing is None:
            self._lines.append(line)
            return line
        merged = replace(existing, quantity=existing.quantity + quantity)
        self._lines = [merged if item.line_id == line.line_id else item for item in self._lines]
        return merged

    def update_quantity(self, line_id, quantity):
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if self.get(line_id) is None:
            raise ValidationError({"line_id": ["Line not found in cart"]})
        self._lines = [replace(line, quantity=quantity) if line.line_id == line_id else line for line in self._lines]

    def change_options(self, line_id, product, new_options):
        self._lines = update_line_options(self._lines, line_id, product, new_options)

    def remove(self, line_id):
        self._lines = [line for line in self._lines if line.line_id != line_id]

    def remove_product(self, product_id):
        self._lines = [line for line in self._lines if line.product_id != str(product_id)]

    def clear(self):
        self._lines = []

    @property
    def total(self):
        return sum(line.line_total for line in self._lines)

    def checkout_lines(self):
        """Lines in the shape the checkout expects."""
        return [
            {
                "product_id": line.product_id,
                "quantity": line.quantity,
                "price": line.price,
                "options": dict(line.options),
            }
            for line in self._lines
        ]

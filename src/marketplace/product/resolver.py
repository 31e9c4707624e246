"""Variant resolution: concrete sale terms for a product and an option selection.

Works on the catalogue representation of a product (the dict produced by
``Product.to_dict()`` and served by the API), so shoppers' carts can be priced
from fetched catalogue data without touching the repository.
"""

from dataclasses import dataclass, field
from enum import Enum


class ResolutionStatus(Enum):
    RESOLVED = "resolved"
    INCOMPLETE_SELECTION = "incomplete_selection"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class VariantResolution:
    """Outcome of resolving a selection against a product."""

    status: ResolutionStatus
    price: float | None = None
    stock: int = 0
    images: list = field(default_factory=list)
    variant: dict | None = None

    @property
    def resolved(self) -> bool:
        return self.status == ResolutionStatus.RESOLVED

    @property
    def purchasable(self) -> bool:
        """Whether add-to-cart may be offered for this selection."""
        return self.resolved and self.stock > 0

    @property
    def image(self) -> dict | None:
        return self.images[0] if self.images else None


def matches_selection(variant_options, selection):
    """A variant matches when it agrees with every selected option value."""
    variant_options = variant_options or {}
    return all(variant_options.get(name) == value for name, value in selection.items())


def resolve_variant(product, selection=None) -> VariantResolution:
    """Resolve ``selection`` (option name → value) against ``product``.

    Simple products (no declared options or no variants) resolve to the
    product's own price, stock and images whatever the selection. Otherwise
    every declared option must be selected before a variant is looked up.
    """
    selection = selection or {}
    declarations = product.get("options") or []
    variants = product.get("variants") or []
    base_price = product.get("base_price")
    product_images = list(product.get("images") or [])

    if not declarations or not variants:
        return VariantResolution(
            status=ResolutionStatus.RESOLVED,
            price=base_price,
            stock=product.get("stock") or 0,
            images=product_images,
        )

    missing = [decl["name"] for decl in declarations if decl["name"] not in selection]
    if missing:
        return VariantResolution(status=ResolutionStatus.INCOMPLETE_SELECTION)

    variant = next((v for v in variants if matches_selection(v.get("options"), selection)), None)
    if variant is None:
        return VariantResolution(status=ResolutionStatus.NOT_FOUND)

    price = variant.get("price")
    return VariantResolution(
        status=ResolutionStatus.RESOLVED,
        price=price if price is not None else base_price,
        stock=variant.get("stock") or 0,
        images=list(variant.get("images") or []) or product_images,
        variant=variant,
    )

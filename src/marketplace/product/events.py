"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductCreated:
    """A vendor published a new product."""

    __version__ = 1

    product_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    name = String(required=True)
    brand = String(required=True)
    category = String(required=True)
    base_price = Float(required=True)
    variant_count = Integer(default=0)
    created_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductDetailsUpdated:
    """Base attributes of a product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    changed_fields = Text(required=True)  # JSON: list of field names
    updated_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductVariantsReplaced:
    """The option declarations and variant list of a product were rewritten."""

    __version__ = 1

    product_id = Identifier(required=True)
    options = Text()  # JSON: [{name, values}]
    variant_count = Integer(required=True)
    updated_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductLikesChanged:
    """A shopper liked or unliked a product."""

    __version__ = 1

    product_id = Identifier(required=True)
    likes = Integer(required=True)

"""Product updates by the owning vendor: command and handler."""

import json

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.product.creation import parse_variant_payload
from marketplace.product.product import Product

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class UpdateProduct:
    """Partial update; fields left unset keep their current value."""

    product_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    name = String(max_length=255)
    description = Text()
    brand = String(max_length=100)
    category = String(max_length=100)
    tags = Text()  # JSON: list of strings
    base_price = Float()
    sku = String(max_length=50)
    stock = Integer()
    is_active = Boolean()
    options = Text()  # JSON: [{name, values}]
    variants = Text()  # JSON: [{options, sku, stock, price, images}]
    images = Text()  # JSON: [{url, public_id}]
    prune_incomplete = Boolean(default=False)


@marketplace.command_handler(part_of=Product)
class UpdateProductHandler:
    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.assert_owned_by(command.vendor_id, action="edit")

        product.update_details(
            name=command.name,
            description=command.description,
            brand=command.brand,
            category=command.category,
            tags=json.loads(command.tags) if command.tags else None,
            base_price=command.base_price,
            sku=command.sku,
            stock=command.stock,
            is_active=command.is_active,
        )

        if command.options is not None or command.variants is not None:
            options, variants = parse_variant_payload(command.options, command.variants, command.prune_incomplete)
            if command.options is None:
                options = product.option_declarations
            if command.variants is None:
                variants = [v.to_dict() for v in product.ordered_variants()]
            product.replace_variants(options, variants)

        if command.images is not None:
            product.replace_images(json.loads(command.images))

        repo.add(product)
        logger.info("Product updated", product_id=str(product.id), vendor_id=str(command.vendor_id))

"""Product creation: command and handler."""

import json

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.product.options import clean_option_declarations, clean_variant_payloads
from marketplace.product.product import Product

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class CreateProduct:
    vendor_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    description = Text()
    brand = String(required=True, max_length=100)
    category = String(required=True, max_length=100)
    tags = Text()  # JSON: list of strings
    base_price = Float(required=True)
    sku = String(max_length=50)
    stock = Integer(default=0)
    options = Text()  # JSON: [{name, values}]
    variants = Text()  # JSON: [{options, sku, stock, price, images}]
    images = Text()  # JSON: [{url, public_id}]
    is_active = Boolean(default=True)
    prune_incomplete = Boolean(default=False)


def parse_variant_payload(options_json, variants_json, prune):
    """Decode option declarations and variants, optionally pruning form leftovers."""
    options = json.loads(options_json) if options_json else []
    variants = json.loads(variants_json) if variants_json else []
    if prune:
        options = clean_option_declarations(options)
        variants = clean_variant_payloads(variants)
    return options, variants


@marketplace.command_handler(part_of=Product)
class CreateProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        options, variants = parse_variant_payload(command.options, command.variants, command.prune_incomplete)

        product = Product.create(
            vendor_id=command.vendor_id,
            name=command.name,
            description=command.description,
            brand=command.brand,
            category=command.category,
            tags=json.loads(command.tags) if command.tags else [],
            base_price=command.base_price,
            sku=command.sku,
            stock=command.stock or 0,
            options=options,
            variants=variants,
            images=json.loads(command.images) if command.images else [],
            is_active=command.is_active if command.is_active is not None else True,
        )
        current_domain.repository_for(Product).add(product)

        logger.info(
            "Product created",
            product_id=str(product.id),
            vendor_id=str(command.vendor_id),
            variant_count=len(product.variants),
        )
        return str(product.id)

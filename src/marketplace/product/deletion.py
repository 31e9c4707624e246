"""Product deletion by the owning vendor: command and handler.

Deleting a product removes it from every saved cart, wishlist and like, then
asks the media store to forget its images. Media failures never block the
deletion; they are logged and the product is removed regardless.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.cart.cart import ShoppingCart
from marketplace.domain import marketplace
from marketplace.engagement.engagement import Like, WishlistItem
from marketplace.media import get_media_store
from marketplace.media.port import MediaStoreError
from marketplace.product.product import Product

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class DeleteProduct:
    product_id = Identifier(required=True)
    vendor_id = Identifier(required=True)


def _purge_from_carts(product_id):
    repo = current_domain.repository_for(ShoppingCart)
    touched = 0
    for record in repo._dao.query.all().items:
        cart = repo.get(record.id)
        if cart.remove_product(product_id):
            repo.add(cart)
            touched += 1
    return touched


def _purge_records(aggregate_cls, product_id):
    repo = current_domain.repository_for(aggregate_cls)
    records = repo._dao.query.filter(product_id=str(product_id)).all().items
    for record in records:
        repo._dao.delete(record)
    return len(records)


def _delete_media(product):
    store = get_media_store()
    for image in product.all_media():
        public_id = image.get("public_id")
        if not public_id:
            continue
        try:
            store.delete(public_id)
        except MediaStoreError as exc:
            logger.warning(
                "Media cleanup failed",
                product_id=str(product.id),
                public_id=public_id,
                error=str(exc),
            )
        except Exception as exc:
            logger.error(
                "Media store unavailable",
                product_id=str(product.id),
                public_id=public_id,
                error=str(exc),
                exc_info=True,
            )


@marketplace.command_handler(part_of=Product)
class DeleteProductHandler:
    @handle(DeleteProduct)
    def delete_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.assert_owned_by(command.vendor_id, action="delete")

        carts = _purge_from_carts(product.id)
        wishlisted = _purge_records(WishlistItem, product.id)
        likes = _purge_records(Like, product.id)
        _delete_media(product)

        repo._dao.delete(product)
        logger.info(
            "Product deleted",
            product_id=str(product.id),
            vendor_id=str(command.vendor_id),
            carts_updated=carts,
            wishlist_entries_removed=wishlisted,
            likes_removed=likes,
        )

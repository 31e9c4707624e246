"""Liking and unliking products: commands and handler.

The product's ``likes`` counter follows the Like records.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.engagement.engagement import Like
from marketplace.product.product import Product

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Like")
class LikeProduct:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@marketplace.command(part_of="Like")
class UnlikeProduct:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


def find_like(user_id, product_id):
    likes = (
        current_domain.repository_for(Like)
        ._dao.query.filter(user_id=str(user_id), product_id=str(product_id))
        .all()
        .items
    )
    return likes[0] if likes else None


@marketplace.command_handler(part_of=Like)
class LikeHandler:
    @handle(LikeProduct)
    def like_product(self, command):
        product_repo = current_domain.repository_for(Product)
        product = product_repo.get(command.product_id)

        if find_like(command.user_id, command.product_id) is not None:
            return product.likes

        current_domain.repository_for(Like).add(Like.create(command.user_id, command.product_id))
        product.record_like()
        product_repo.add(product)
        return product.likes

    @handle(UnlikeProduct)
    def unlike_product(self, command):
        product_repo = current_domain.repository_for(Product)
        product = product_repo.get(command.product_id)

        like = find_like(command.user_id, command.product_id)
        if like is None:
            return product.likes

        current_domain.repository_for(Like)._dao.delete(like)
        product.record_unlike()
        product_repo.add(product)
        return product.likes

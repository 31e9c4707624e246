"""Shopper engagement: likes and wishlist entries.

Both are tiny aggregates keyed by ``(user_id, product_id)``; a user can like a
product or wishlist it at most once.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier

from marketplace.domain import marketplace


@marketplace.aggregate
class Like:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    created_at = DateTime()

    @classmethod
    def create(cls, user_id, product_id):
        return cls(user_id=user_id, product_id=product_id, created_at=datetime.now(UTC))


@marketplace.aggregate
class WishlistItem:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    added_at = DateTime()

    @classmethod
    def create(cls, user_id, product_id):
        return cls(user_id=user_id, product_id=product_id, added_at=datetime.now(UTC))

"""Wishlist: commands and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.engagement.engagement import WishlistItem
from marketplace.product.product import Product


@marketplace.command(part_of="WishlistItem")
class AddToWishlist:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


@marketplace.command(part_of="WishlistItem")
class RemoveFromWishlist:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)


def wishlist_entries(user_id):
    """A user's wishlist entries, most recently added first."""
    entries = current_domain.repository_for(WishlistItem)._dao.query.filter(user_id=str(user_id)).all().items
    return sorted(entries, key=lambda e: e.added_at, reverse=True)


@marketplace.command_handler(part_of=WishlistItem)
class WishlistHandler:
    @handle(AddToWishlist)
    def add_to_wishlist(self, command):
        # Raises ObjectNotFoundError for unknown products
        current_domain.repository_for(Product).get(command.product_id)

        if any(str(e.product_id) == str(command.product_id) for e in wishlist_entries(command.user_id)):
            return
        current_domain.repository_for(WishlistItem).add(WishlistItem.create(command.user_id, command.product_id))

    @handle(RemoveFromWishlist)
    def remove_from_wishlist(self, command):
        repo = current_domain.repository_for(WishlistItem)
        for entry in wishlist_entries(command.user_id):
            if str(entry.product_id) == str(command.product_id):
                repo._dao.delete(entry)

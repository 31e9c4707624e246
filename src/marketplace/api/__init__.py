"""Marketplace API package."""

from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import (
    cart_router,
    engagement_router,
    order_router,
    product_router,
    vendor_router,
)

__all__ = [
    "cart_router",
    "engagement_router",
    "order_router",
    "product_router",
    "register_error_handlers",
    "vendor_router",
]

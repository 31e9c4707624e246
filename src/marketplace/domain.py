"""Marketplace bounded context: multi-vendor catalogue, carts and orders.

Vendors publish products (simple or with option-based variants), shoppers
compose carts against those products, and a checkout is split into one order
per vendor. Each vendor then drives its own orders through the status workflow.
"""

import structlog
from protean.domain import Domain

marketplace = Domain(name="marketplace")

logger = structlog.get_logger(__name__)

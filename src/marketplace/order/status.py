"""Vendor-driven status changes: command and handler."""

import os

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


def enforce_status_workflow():
    return os.environ.get("ENFORCE_STATUS_WORKFLOW", "").lower() in ("1", "true", "yes", "on")


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    status = String(required=True, max_length=30)


@marketplace.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        order.set_status(command.status, command.vendor_id, enforce_forward=enforce_status_workflow())
        repo.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            order_number=order.order_number,
            previous_status=previous,
            new_status=order.status,
        )

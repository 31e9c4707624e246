"""Checkout: split one customer checkout into an order per vendor.

Flow:
    1. Validate the request (an identified caller, at least one well-formed line, an address)
    2. Look up the vendor of every distinct product; lines whose product no
       longer exists are dropped and reported
    3. Group the remaining lines by vendor, keeping their input order
    4. Persist each vendor's order through its own CreateVendorOrder command

Vendor orders are independent: one vendor's failure does not undo the orders
already placed with others. The result says which succeeded and which failed.
"""

import json
from dataclasses import dataclass, field
from enum import Enum

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.exceptions import AuthorizationError
from marketplace.order.numbering import OrderNumberBatch
from marketplace.order.order import Order, ShippingAddress
from marketplace.product.product import Product

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Vendor order creation
# ---------------------------------------------------------------------------
@marketplace.command(part_of="Order")
class CreateVendorOrder:
    order_number = String(required=True, max_length=64)
    vendor_id = Identifier(required=True)
    user_id = Identifier()
    guest_id = String(max_length=255)
    items = Text(required=True)  # JSON: [{product_id, quantity, price, options}]
    shipping_address = Text(required=True)  # JSON: address dict


@marketplace.command_handler(part_of=Order)
class CreateVendorOrderHandler:
    @handle(CreateVendorOrder)
    def create_vendor_order(self, command):
        order = Order.create(
            order_number=command.order_number,
            vendor_id=command.vendor_id,
            lines=json.loads(command.items),
            shipping_address=json.loads(command.shipping_address),
            user_id=command.user_id,
            guest_id=command.guest_id,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
class CheckoutStatus(Enum):
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class VendorOrderFailure:
    vendor_id: str
    product_ids: list
    reason: str


@dataclass(frozen=True)
class CheckoutResult:
    orders: list = field(default_factory=list)  # Order dicts, one per vendor
    failures: list = field(default_factory=list)  # VendorOrderFailure
    dropped_product_ids: list = field(default_factory=list)

    @property
    def status(self) -> CheckoutStatus:
        if not self.failures:
            return CheckoutStatus.COMPLETED
        if self.orders:
            return CheckoutStatus.PARTIAL
        return CheckoutStatus.FAILED

    def to_dict(self):
        return {
            "status": self.status.value,
            "orders": self.orders,
            "failures": [
                {"vendor_id": f.vendor_id, "product_ids": f.product_ids, "reason": f.reason} for f in self.failures
            ],
            "dropped_product_ids": self.dropped_product_ids,
        }


# ---------------------------------------------------------------------------
# Splitting
# ---------------------------------------------------------------------------
def _quantity(value):
    if isinstance(value, bool):
        raise ValidationError({"items": ["Quantity must be a whole number"]})
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int):
        raise ValidationError({"items": ["Quantity must be a whole number"]})
    if value < 1:
        raise ValidationError({"items": ["Quantity must be at least 1"]})
    return value


def _price(value):
    if value is None or isinstance(value, bool):
        raise ValidationError({"items": ["Price must be zero or more"]})
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise ValidationError({"items": ["Price must be a number"]}) from None
    if price < 0:
        raise ValidationError({"items": ["Price must be zero or more"]})
    return price


def _validate_lines(lines):
    """Normalized copies of the checkout lines; ValidationError on the first bad one."""
    if not lines:
        raise ValidationError({"items": ["No items in order"]})
    validated = []
    for line in lines:
        if not line.get("product_id"):
            raise ValidationError({"items": ["Every item needs a product_id"]})
        options = line.get("options") or {}
        if not isinstance(options, dict):
            raise ValidationError({"items": ["Options must map option names to values"]})
        validated.append(
            {
                "product_id": str(line["product_id"]),
                "quantity": _quantity(line.get("quantity")),
                "price": _price(line.get("price")),
                "options": dict(options),
            }
        )
    return validated


def vendor_lookup(product_ids):
    """product id → vendor id for the products that exist, in one query."""
    ids = list(dict.fromkeys(str(p) for p in product_ids))
    if not ids:
        return {}
    records = current_domain.repository_for(Product)._dao.query.filter(id__in=ids).limit(len(ids)).all().items
    return {str(record.id): str(record.vendor_id) for record in records}


def group_by_vendor(lines, vendors):
    """Group validated lines by vendor in first-seen order; returns (groups, dropped product ids)."""
    groups = {}
    dropped = []
    for line in lines:
        product_id = line["product_id"]
        vendor_id = vendors.get(product_id)
        if vendor_id is None:
            if product_id not in dropped:
                dropped.append(product_id)
            continue
        groups.setdefault(vendor_id, []).append(line)
    return groups, dropped


def _process(command):
    return current_domain.process(command, asynchronous=False)


class Checkout:
    """Places the vendor orders of one checkout.

    ``dispatch`` runs a CreateVendorOrder command and returns the new order id;
    it defaults to synchronous processing in the current domain.
    """

    def __init__(self, dispatch=None, prefix=None):
        self.dispatch = dispatch or _process
        self.prefix = prefix

    def place(self, lines, shipping_address, user_id=None, guest_id=None) -> CheckoutResult:
        if not user_id and not guest_id:
            raise AuthorizationError("Not authorized")
        lines = _validate_lines(lines)
        ShippingAddress(**(shipping_address or {}))

        vendors = vendor_lookup(line["product_id"] for line in lines)
        groups, dropped = group_by_vendor(lines, vendors)
        if dropped:
            logger.warning("Checkout dropped missing products", product_ids=dropped)
        if not groups:
            raise ObjectNotFoundError("None of the products in this order exist")

        numbers = OrderNumberBatch(prefix=self.prefix)
        orders = []
        failures = []
        for vendor_id, vendor_lines in groups.items():
            command = CreateVendorOrder(
                order_number=numbers.next(),
                vendor_id=vendor_id,
                user_id=user_id,
                guest_id=None if user_id else guest_id,
                items=json.dumps(vendor_lines),
                shipping_address=json.dumps(shipping_address),
            )
            try:
                order_id = self.dispatch(command)
                orders.append(current_domain.repository_for(Order).get(order_id).to_dict())
            except Exception as exc:
                logger.error(
                    "Vendor order failed",
                    vendor_id=vendor_id,
                    order_number=command.order_number,
                    error=str(exc),
                    exc_info=True,
                )
                failures.append(
                    VendorOrderFailure(
                        vendor_id=vendor_id,
                        product_ids=[line["product_id"] for line in vendor_lines],
                        reason=str(exc) or exc.__class__.__name__,
                    )
                )

        result = CheckoutResult(orders=orders, failures=failures, dropped_product_ids=dropped)
        logger.info(
            "Checkout finished",
            status=result.status.value,
            orders=len(orders),
            failures=len(failures),
            dropped=len(dropped),
        )
        return result

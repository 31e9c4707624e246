"""Order reads for customers and vendors.

Customers see their own orders (by user id, or by guest id before signing
in). Vendors see the orders that contain their items.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.exceptions import AuthorizationError
from marketplace.order.order import Order


def _newest_first(orders):
    return sorted(orders, key=lambda o: o.created_at, reverse=True)


def _load(records):
    repo = current_domain.repository_for(Order)
    return [repo.get(r.id) for r in records]


def my_orders(user_id=None, guest_id=None):
    dao = current_domain.repository_for(Order)._dao
    if user_id:
        records = dao.query.filter(user_id=str(user_id)).all().items
    elif guest_id:
        records = dao.query.filter(guest_id=guest_id).all().items
    else:
        return []
    return _newest_first(_load(records))


def vendor_orders(vendor_id):
    records = current_domain.repository_for(Order)._dao.query.filter(vendor_id=str(vendor_id)).all().items
    orders = [o for o in _load(records) if o.involves_vendor(vendor_id)]
    return _newest_first(orders)


def _check_visible(order, user_id=None, guest_id=None, vendor_id=None):
    if order.belongs_to(user_id=user_id, guest_id=guest_id) or order.involves_vendor(vendor_id):
        return order
    raise AuthorizationError("Not authorized")


def order_by_id(order_id, user_id=None, guest_id=None, vendor_id=None):
    order = current_domain.repository_for(Order).get(order_id)
    return _check_visible(order, user_id=user_id, guest_id=guest_id, vendor_id=vendor_id)


def order_by_number(order_number, user_id=None, guest_id=None, vendor_id=None):
    records = current_domain.repository_for(Order)._dao.query.filter(order_number=order_number).all().items
    if not records:
        raise ObjectNotFoundError("Order not found")
    order = current_domain.repository_for(Order).get(records[0].id)
    return _check_visible(order, user_id=user_id, guest_id=guest_id, vendor_id=vendor_id)

"""Catalogue reads: filtered listings, distinct values and search suggestions.

Filtering happens in Python over the active products; the catalogue is small
and the store only offers equality filters.
"""

import os
from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.product.product import Product
from marketplace.vendor.vendor import Vendor

DEFAULT_LIST_LIMIT = 50
MAX_SUGGESTIONS = 10
MAX_NAME_SUGGESTIONS = 5


def list_limit():
    return int(os.environ.get("PRODUCT_LIST_LIMIT", DEFAULT_LIST_LIMIT))


def split_values(raw):
    """Comma-separated query value → list of non-blank entries."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class ProductFilter:
    brand: str | None = None
    category: str | None = None
    color: str | None = None
    search: str | None = None
    vendor: str | None = None
    min_price: float | None = None
    max_price: float | None = None

    def matches(self, product):
        brands = split_values(self.brand)
        if brands and product.brand not in brands:
            return False
        categories = split_values(self.category)
        if categories and product.category not in categories:
            return False
        colors = split_values(self.color)
        if colors and not any(v.option_map.get("Color") in colors for v in product.variants):
            return False
        if self.search and self.search.lower() not in (product.name or "").lower():
            return False
        if self.vendor and str(product.vendor_id) != str(self.vendor):
            return False
        if self.min_price is not None and product.base_price < self.min_price:
            return False
        if self.max_price is not None and product.base_price > self.max_price:
            return False
        return True


def _newest_first(products):
    return sorted(products, key=lambda p: p.created_at, reverse=True)


def active_products():
    repo = current_domain.repository_for(Product)
    return [repo.get(p.id) for p in repo._dao.query.filter(is_active=True).all().items]


def vendor_products(vendor_id, active_only=False):
    repo = current_domain.repository_for(Product)
    products = [repo.get(p.id) for p in repo._dao.query.filter(vendor_id=str(vendor_id)).all().items]
    if active_only:
        products = [p for p in products if p.is_active]
    return _newest_first(products)


def vendor_names(vendor_ids):
    """Vendor id → storefront name for the given ids; unknown vendors are skipped."""
    repo = current_domain.repository_for(Vendor)
    names = {}
    for vendor_id in {str(v) for v in vendor_ids}:
        try:
            names[vendor_id] = repo.get(vendor_id).name
        except ObjectNotFoundError:
            continue
    return names


def with_vendor(products):
    """Catalogue dicts with the vendor reference expanded to ``{id, name}``."""
    names = vendor_names(p.vendor_id for p in products)
    result = []
    for product in products:
        data = product.to_dict()
        data["vendor"] = {"id": data["vendor_id"], "name": names.get(data["vendor_id"])}
        result.append(data)
    return result


def find_products(product_filter=None):
    product_filter = product_filter or ProductFilter()
    matching = [p for p in active_products() if product_filter.matches(p)]
    return _newest_first(matching)[: list_limit()]


def get_product(product_id):
    return current_domain.repository_for(Product).get(product_id)


def _distinct(values):
    seen = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def distinct_brands():
    return _distinct(p.brand for p in active_products())


def distinct_categories():
    return _distinct(p.category for p in active_products())


def distinct_tags():
    return _distinct(tag for p in active_products() for tag in p.tag_list)


def distinct_colors():
    return _distinct(color for p in active_products() for color in p.color_values())


def suggestions(query):
    """Up to five matching product names, then matching categories and brands."""
    if not query:
        return []
    needle = query.lower()
    products = active_products()

    names = [p.name for p in products if needle in p.name.lower()][:MAX_NAME_SUGGESTIONS]
    categories = [p.category for p in products if needle in p.category.lower()]
    brands = [p.brand for p in products if needle in p.brand.lower()]
    return _distinct(names + categories + brands)[:MAX_SUGGESTIONS]

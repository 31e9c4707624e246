"""Product aggregate: catalogue entry owned by a single vendor.

A product is either simple (no variants; ``stock`` and ``base_price`` apply
directly) or declares option axes such as Color and Size and lists the
purchasable combinations as variants. Option maps are stored as JSON and
validated against the declared axes.

Invariants:
    - no two variants share an option combination (key order is irrelevant)
    - every option name a variant uses is declared on the product
    - every variant selects at least one option
"""

import json
from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
)

from marketplace.domain import marketplace
from marketplace.exceptions import AuthorizationError
from marketplace.product.events import (
    ProductCreated,
    ProductDetailsUpdated,
    ProductLikesChanged,
    ProductVariantsReplaced,
)
from marketplace.product.options import (
    canonical_options,
    describe_combination,
    duplicate_combinations,
    undeclared_option_names,
)

# Base attributes a vendor may change through update_details
UPDATABLE_FIELDS = (
    "name",
    "description",
    "brand",
    "category",
    "tags",
    "base_price",
    "sku",
    "stock",
    "is_active",
)


def _load(raw, default):
    if not raw:
        return default
    return json.loads(raw) if isinstance(raw, str) else raw


def _unique_tags(tags):
    seen = []
    for tag in tags or []:
        tag = str(tag).strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def _image_dicts(images):
    return [{"url": img["url"], "public_id": img.get("public_id", "")} for img in images or []]


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Product")
class Variant:
    """One purchasable combination of option values with its own stock and price."""

    options = Text(required=True)  # JSON: {option name: value}
    sku = String(max_length=50)
    stock = Integer(default=0, min_value=0)
    price = Float(min_value=0.0)  # Falls back to the product's base price when unset
    images = Text()  # JSON: [{url, public_id}]
    position = Integer(default=0)

    @property
    def option_map(self):
        return _load(self.options, {})

    def to_dict(self):
        return {
            "options": self.option_map,
            "sku": self.sku,
            "stock": self.stock,
            "price": self.price,
            "images": _load(self.images, []),
        }


@marketplace.entity(part_of="Product")
class Image:
    url = String(required=True, max_length=500)
    public_id = String(max_length=255)
    display_order = Integer(default=0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = Text()
    brand = String(required=True, max_length=100)
    category = String(required=True, max_length=100)
    tags = Text()  # JSON: list of unique strings
    base_price = Float(required=True, min_value=0.0)
    sku = String(max_length=50)
    stock = Integer(default=0, min_value=0)  # Simple products only
    options = Text()  # JSON: [{name, values}] in declaration order
    variants = HasMany(Variant)
    images = HasMany(Image)
    vendor_id = Identifier(required=True)
    is_active = Boolean(default=True)
    rating = Float(default=0.0)
    review_count = Integer(default=0)
    likes = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def variants_must_select_options(self):
        for variant in self.variants:
            if not variant.option_map:
                raise ValidationError({"variants": ["Every variant must select at least one option"]})

    @invariant.post
    def variant_options_must_be_declared(self):
        declarations = self.option_declarations
        for variant in self.variants:
            undeclared = undeclared_option_names(declarations, variant.option_map)
            if undeclared:
                raise ValidationError(
                    {"variants": [f"Variant uses undeclared options: {', '.join(undeclared)}"]}
                )

    @invariant.post
    def variant_combinations_must_be_unique(self):
        duplicates = duplicate_combinations(v.option_map for v in self.variants)
        if duplicates:
            raise ValidationError(
                {
                    "variants": [
                        "Product variants must have unique option combinations "
                        f"(duplicated: {describe_combination(duplicates[0])})"
                    ]
                }
            )

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    @property
    def option_declarations(self):
        return _load(self.options, [])

    @property
    def tag_list(self):
        return _load(self.tags, [])

    @property
    def is_simple(self):
        return not self.variants

    def ordered_variants(self):
        return sorted(self.variants, key=lambda v: v.position or 0)

    def ordered_images(self):
        return sorted(self.images, key=lambda i: i.display_order or 0)

    def find_variant(self, options):
        key = canonical_options(options)
        return next((v for v in self.variants if canonical_options(v.option_map) == key), None)

    def color_values(self):
        decl = next((d for d in self.option_declarations if d["name"] == "Color"), None)
        return list(decl["values"]) if decl else []

    def is_owned_by(self, vendor_id):
        return vendor_id is not None and str(self.vendor_id) == str(vendor_id)

    def assert_owned_by(self, vendor_id, action="edit"):
        if not self.is_owned_by(vendor_id):
            raise AuthorizationError(f"Not authorized to {action} this product")

    def to_dict(self):
        """Catalogue representation, also the input shape of ``resolve_variant``."""
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "brand": self.brand,
            "category": self.category,
            "tags": self.tag_list,
            "base_price": self.base_price,
            "sku": self.sku,
            "stock": self.stock,
            "options": self.option_declarations,
            "variants": [v.to_dict() for v in self.ordered_variants()],
            "images": [{"url": i.url, "public_id": i.public_id or ""} for i in self.ordered_images()],
            "vendor_id": str(self.vendor_id),
            "is_active": self.is_active,
            "rating": self.rating,
            "reviews": self.review_count,
            "likes": self.likes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        vendor_id,
        name,
        brand,
        category,
        base_price,
        description=None,
        tags=None,
        sku=None,
        stock=0,
        options=None,
        variants=None,
        images=None,
        is_active=True,
    ):
        """Create a product with its option declarations, variants and images."""
        now = datetime.now(UTC)

        product = cls(
            vendor_id=vendor_id,
            name=name,
            description=description,
            brand=brand,
            category=category,
            tags=json.dumps(_unique_tags(tags)),
            base_price=base_price,
            sku=sku,
            stock=stock or 0,
            options=json.dumps(options or []),
            is_active=is_active,
            rating=0.0,
            review_count=0,
            likes=0,
            created_at=now,
            updated_at=now,
        )

        with atomic_change(product):
            for position, variant in enumerate(variants or []):
                product.add_variants(cls._build_variant(variant, position))
            for order, image in enumerate(_image_dicts(images)):
                product.add_images(Image(url=image["url"], public_id=image["public_id"], display_order=order))

        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                vendor_id=str(vendor_id),
                name=name,
                brand=brand,
                category=category,
                base_price=base_price,
                variant_count=len(product.variants),
                created_at=now,
            )
        )
        return product

    @staticmethod
    def _build_variant(data, position):
        return Variant(
            options=json.dumps(data.get("options") or {}),
            sku=data.get("sku"),
            stock=data.get("stock", 0),
            price=data.get("price"),
            images=json.dumps(_image_dicts(data.get("images"))),
            position=position,
        )

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply changes to base attributes; ``None`` values are ignored."""
        unknown = sorted(set(changes) - set(UPDATABLE_FIELDS))
        if unknown:
            raise ValidationError({"product": [f"Unknown fields: {', '.join(unknown)}"]})

        applied = {k: v for k, v in changes.items() if v is not None}
        if not applied:
            return

        now = datetime.now(UTC)
        with atomic_change(self):
            for field_name, value in applied.items():
                if field_name == "tags":
                    value = json.dumps(_unique_tags(value))
                setattr(self, field_name, value)
            self.updated_at = now

        self.raise_(
            ProductDetailsUpdated(
                product_id=str(self.id),
                changed_fields=json.dumps(sorted(applied)),
                updated_at=now,
            )
        )

    def replace_variants(self, options, variants):
        """Rewrite option declarations and variants together.

        Both are replaced in one atomic change so a new axis and the variants
        that use it are validated as a whole.
        """
        now = datetime.now(UTC)
        with atomic_change(self):
            self.options = json.dumps(options or [])
            for existing in list(self.variants):
                self.remove_variants(existing)
            for position, variant in enumerate(variants or []):
                self.add_variants(self._build_variant(variant, position))
            self.updated_at = now

        self.raise_(
            ProductVariantsReplaced(
                product_id=str(self.id),
                options=self.options,
                variant_count=len(self.variants),
                updated_at=now,
            )
        )

    def replace_images(self, images):
        now = datetime.now(UTC)
        with atomic_change(self):
            for existing in list(self.images):
                self.remove_images(existing)
            for order, image in enumerate(_image_dicts(images)):
                self.add_images(Image(url=image["url"], public_id=image["public_id"], display_order=order))
            self.updated_at = now

    def all_media(self):
        """Every stored image of the product and its variants, product images first."""
        media = [{"url": i.url, "public_id": i.public_id or ""} for i in self.ordered_images()]
        for variant in self.ordered_variants():
            media.extend(_load(variant.images, []))
        return media

    def record_like(self):
        self.likes = (self.likes or 0) + 1
        self.raise_(ProductLikesChanged(product_id=str(self.id), likes=self.likes))

    def record_unlike(self):
        self.likes = max(0, (self.likes or 0) - 1)
        self.raise_(ProductLikesChanged(product_id=str(self.id), likes=self.likes))

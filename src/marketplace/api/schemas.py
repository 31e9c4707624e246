"""Pydantic request/response schemas for the Marketplace API.

These are external contracts, kept separate from the internal Protean
commands. Product and order responses are the aggregates' ``to_dict()``.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ImageSchema(BaseModel):
    url: str
    public_id: str = ""


class OptionSchema(BaseModel):
    name: str
    values: list[str] = Field(default_factory=list)


class VariantSchema(BaseModel):
    options: dict[str, str] = Field(default_factory=dict)
    sku: str | None = None
    stock: int = 0
    price: float | None = None
    images: list[ImageSchema] = Field(default_factory=list)


class AddressSchema(BaseModel):
    full_name: str | None = None
    street: str
    city: str
    state: str | None = None
    postal_code: str
    country: str
    phone: str | None = None


# ---------------------------------------------------------------------------
# Product Schemas
# ---------------------------------------------------------------------------
class CreateProductRequest(BaseModel):
    name: str
    description: str | None = None
    brand: str
    category: str
    tags: list[str] = Field(default_factory=list)
    base_price: float
    sku: str | None = None
    stock: int = 0
    options: list[OptionSchema] = Field(default_factory=list)
    variants: list[VariantSchema] = Field(default_factory=list)
    images: list[ImageSchema] = Field(default_factory=list)
    is_active: bool = True
    prune_incomplete: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Linen Shirt",
                    "brand": "Acme",
                    "category": "Shirts",
                    "base_price": 40.0,
                    "options": [{"name": "Size", "values": ["S", "M"]}],
                    "variants": [
                        {"options": {"Size": "S"}, "stock": 10},
                        {"options": {"Size": "M"}, "stock": 0},
                    ],
                }
            ]
        }
    }


class UpdateProductRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    brand: str | None = None
    category: str | None = None
    tags: list[str] | None = None
    base_price: float | None = None
    sku: str | None = None
    stock: int | None = None
    is_active: bool | None = None
    options: list[OptionSchema] | None = None
    variants: list[VariantSchema] | None = None
    images: list[ImageSchema] | None = None
    prune_incomplete: bool = False


class ResolveVariantRequest(BaseModel):
    options: dict[str, str] = Field(default_factory=dict)


class VariantResolutionResponse(BaseModel):
    status: str
    price: float | None = None
    stock: int = 0
    purchasable: bool = False
    images: list[ImageSchema] = Field(default_factory=list)


class LikesResponse(BaseModel):
    product_id: str
    likes: int


# ---------------------------------------------------------------------------
# Cart Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    options: dict[str, str] = Field(default_factory=dict)
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int = Field(ge=1)


class ChangeCartOptionsRequest(BaseModel):
    options: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Order Schemas
# ---------------------------------------------------------------------------
class CheckoutItemSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)
    options: dict[str, str] = Field(default_factory=dict)


class CheckoutRequest(BaseModel):
    items: list[CheckoutItemSchema] = Field(default_factory=list)
    shipping_address: AddressSchema

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "p-1", "quantity": 2, "price": 40.0, "options": {"Size": "S"}}],
                    "shipping_address": {
                        "street": "1 Main St",
                        "city": "Springfield",
                        "postal_code": "12345",
                        "country": "US",
                    },
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str | None = None


# ---------------------------------------------------------------------------
# Vendor Schemas
# ---------------------------------------------------------------------------
class RegisterVendorRequest(BaseModel):
    name: str
    email: str
    description: str | None = None
    phone: str | None = None
    website: str | None = None
    address: str | None = None


class UpdateVendorRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    description: str | None = None
    phone: str | None = None
    website: str | None = None
    address: str | None = None


class VendorIdResponse(BaseModel):
    vendor_id: str


class StatusResponse(BaseModel):
    status: str = "ok"

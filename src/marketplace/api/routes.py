"""FastAPI endpoints for the Marketplace."""

import json

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.api.identity import Caller, get_caller
from marketplace.api.schemas import (
    AddToCartRequest,
    ChangeCartOptionsRequest,
    CheckoutRequest,
    CreateProductRequest,
    LikesResponse,
    RegisterVendorRequest,
    ResolveVariantRequest,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateOrderStatusRequest,
    UpdateProductRequest,
    UpdateVendorRequest,
    VariantResolutionResponse,
    VendorIdResponse,
)
from marketplace.cart.items import (
    AddToCart,
    ChangeCartLineOptions,
    ClearCart,
    RemoveFromCart,
    UpdateCartQuantity,
    find_cart,
)
from marketplace.engagement.likes import LikeProduct, UnlikeProduct
from marketplace.engagement.wishlist import AddToWishlist, RemoveFromWishlist, wishlist_entries
from marketplace.order import queries as order_queries
from marketplace.order.checkout import Checkout, CheckoutStatus
from marketplace.order.order import parse_status
from marketplace.order.status import UpdateOrderStatus
from marketplace.product import queries as product_queries
from marketplace.product.creation import CreateProduct
from marketplace.product.deletion import DeleteProduct
from marketplace.product.details import UpdateProduct
from marketplace.product.resolver import resolve_variant
from marketplace.vendor.registration import RegisterVendor, UpdateVendorProfile
from marketplace.vendor.vendor import Vendor

product_router = APIRouter(prefix="/products", tags=["products"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
vendor_router = APIRouter(prefix="/vendors", tags=["vendors"])
engagement_router = APIRouter(tags=["engagement"])

_CHECKOUT_STATUS_CODES = {
    CheckoutStatus.COMPLETED: 201,
    CheckoutStatus.PARTIAL: 207,
    CheckoutStatus.FAILED: 500,
}


def _dumps(items):
    return json.dumps([item.model_dump() for item in items])


def _dumps_optional(items):
    return None if items is None else _dumps(items)


# --- Product endpoints ---


@product_router.post("", status_code=201)
async def create_product(body: CreateProductRequest, caller: Caller = Depends(get_caller)) -> dict:
    vendor_id = caller.require_vendor("create products")
    command = CreateProduct(
        vendor_id=vendor_id,
        name=body.name,
        description=body.description,
        brand=body.brand,
        category=body.category,
        tags=json.dumps(body.tags),
        base_price=body.base_price,
        sku=body.sku,
        stock=body.stock,
        options=_dumps(body.options),
        variants=_dumps(body.variants),
        images=_dumps(body.images),
        is_active=body.is_active,
        prune_incomplete=body.prune_incomplete,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return product_queries.get_product(product_id).to_dict()


@product_router.get("")
async def list_products(
    brand: str | None = None,
    category: str | None = None,
    color: str | None = None,
    search: str | None = None,
    vendor: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
) -> list[dict]:
    product_filter = product_queries.ProductFilter(
        brand=brand,
        category=category,
        color=color,
        search=search,
        vendor=vendor,
        min_price=min_price,
        max_price=max_price,
    )
    return product_queries.with_vendor(product_queries.find_products(product_filter))


@product_router.get("/brands")
async def list_brands() -> list[str]:
    return product_queries.distinct_brands()


@product_router.get("/categories")
async def list_categories() -> list[str]:
    return product_queries.distinct_categories()


@product_router.get("/colors")
async def list_colors() -> list[str]:
    return product_queries.distinct_colors()


@product_router.get("/tags")
async def list_tags() -> list[str]:
    return product_queries.distinct_tags()


@product_router.get("/suggestions")
async def search_suggestions(query: str | None = None) -> list[str]:
    return product_queries.suggestions(query)


@product_router.get("/{product_id}")
async def get_product(product_id: str) -> dict:
    return product_queries.with_vendor([product_queries.get_product(product_id)])[0]


@product_router.post("/{product_id}/resolve", response_model=VariantResolutionResponse)
async def resolve_product_variant(product_id: str, body: ResolveVariantRequest) -> VariantResolutionResponse:
    resolution = resolve_variant(product_queries.get_product(product_id).to_dict(), body.options)
    return VariantResolutionResponse(
        status=resolution.status.value,
        price=resolution.price,
        stock=resolution.stock,
        purchasable=resolution.purchasable,
        images=resolution.images,
    )


@product_router.put("/{product_id}")
async def update_product(product_id: str, body: UpdateProductRequest, caller: Caller = Depends(get_caller)) -> dict:
    vendor_id = caller.require_vendor("edit products")
    command = UpdateProduct(
        product_id=product_id,
        vendor_id=vendor_id,
        name=body.name,
        description=body.description,
        brand=body.brand,
        category=body.category,
        tags=json.dumps(body.tags) if body.tags is not None else None,
        base_price=body.base_price,
        sku=body.sku,
        stock=body.stock,
        is_active=body.is_active,
        options=_dumps_optional(body.options),
        variants=_dumps_optional(body.variants),
        images=_dumps_optional(body.images),
        prune_incomplete=body.prune_incomplete,
    )
    current_domain.process(command, asynchronous=False)
    return product_queries.get_product(product_id).to_dict()


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def delete_product(product_id: str, caller: Caller = Depends(get_caller)) -> StatusResponse:
    vendor_id = caller.require_vendor("delete products")
    current_domain.process(DeleteProduct(product_id=product_id, vendor_id=vendor_id), asynchronous=False)
    return StatusResponse(status="deleted")


# --- Order endpoints ---


@order_router.post("")
async def checkout(body: CheckoutRequest, caller: Caller = Depends(get_caller)) -> JSONResponse:
    result = Checkout().place(
        lines=[item.model_dump() for item in body.items],
        shipping_address=body.shipping_address.model_dump(),
        user_id=caller.user_id,
        guest_id=caller.guest_id,
    )
    return JSONResponse(status_code=_CHECKOUT_STATUS_CODES[result.status], content=result.to_dict())


@order_router.get("/mine")
async def my_orders(caller: Caller = Depends(get_caller)) -> list[dict]:
    orders = order_queries.my_orders(user_id=caller.user_id, guest_id=caller.guest_id)
    return [o.to_dict() for o in orders]


@order_router.get("/vendor")
async def vendor_orders(caller: Caller = Depends(get_caller)) -> list[dict]:
    vendor_id = caller.require_vendor()
    return [o.to_dict() for o in order_queries.vendor_orders(vendor_id)]


@order_router.get("/by-number/{order_number}")
async def order_by_number(order_number: str, caller: Caller = Depends(get_caller)) -> dict:
    order = order_queries.order_by_number(
        order_number, user_id=caller.user_id, guest_id=caller.guest_id, vendor_id=caller.vendor_id
    )
    return order.to_dict()


@order_router.get("/{order_id}")
async def order_by_id(order_id: str, caller: Caller = Depends(get_caller)) -> dict:
    order = order_queries.order_by_id(
        order_id, user_id=caller.user_id, guest_id=caller.guest_id, vendor_id=caller.vendor_id
    )
    return order.to_dict()


@order_router.put("/{order_id}/status")
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, caller: Caller = Depends(get_caller)
) -> dict:
    vendor_id = caller.require_vendor("update status")
    if not body.status:
        raise ValidationError({"status": ["Status is required"]})
    parse_status(body.status)

    command = UpdateOrderStatus(order_id=order_id, vendor_id=vendor_id, status=body.status)
    current_domain.process(command, asynchronous=False)
    return order_queries.order_by_id(order_id, vendor_id=vendor_id).to_dict()


# --- Cart endpoints ---


def _cart_owner(caller):
    if caller.user_id:
        return {"user_id": caller.user_id}
    if caller.guest_id:
        return {"guest_id": caller.guest_id}
    raise ValidationError({"cart": ["A user or guest id is required"]})


def _cart_response(caller):
    cart = find_cart(**_cart_owner(caller))
    if cart is None:
        return {"id": None, **_cart_owner(caller), "items": [], "total": 0.0}
    return cart.to_dict()


@cart_router.get("")
async def get_cart(caller: Caller = Depends(get_caller)) -> dict:
    return _cart_response(caller)


@cart_router.post("/items", status_code=201)
async def add_cart_item(body: AddToCartRequest, caller: Caller = Depends(get_caller)) -> dict:
    command = AddToCart(
        **_cart_owner(caller),
        product_id=body.product_id,
        options=json.dumps(body.options),
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(caller)


@cart_router.put("/items/{line_id}")
async def update_cart_item_quantity(
    line_id: str, body: UpdateCartQuantityRequest, caller: Caller = Depends(get_caller)
) -> dict:
    command = UpdateCartQuantity(**_cart_owner(caller), line_id=line_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_response(caller)


@cart_router.put("/items/{line_id}/options")
async def change_cart_item_options(
    line_id: str, body: ChangeCartOptionsRequest, caller: Caller = Depends(get_caller)
) -> dict:
    command = ChangeCartLineOptions(**_cart_owner(caller), line_id=line_id, options=json.dumps(body.options))
    current_domain.process(command, asynchronous=False)
    return _cart_response(caller)


@cart_router.delete("/items/{line_id}")
async def remove_cart_item(line_id: str, caller: Caller = Depends(get_caller)) -> dict:
    current_domain.process(RemoveFromCart(**_cart_owner(caller), line_id=line_id), asynchronous=False)
    return _cart_response(caller)


@cart_router.delete("")
async def clear_cart(caller: Caller = Depends(get_caller)) -> dict:
    current_domain.process(ClearCart(**_cart_owner(caller)), asynchronous=False)
    return _cart_response(caller)


# --- Vendor endpoints ---


@vendor_router.post("", status_code=201, response_model=VendorIdResponse)
async def register_vendor(body: RegisterVendorRequest, caller: Caller = Depends(get_caller)) -> VendorIdResponse:
    user_id = caller.require_vendor("register a storefront")
    command = RegisterVendor(
        user_id=user_id,
        name=body.name,
        email=body.email,
        description=body.description,
        phone=body.phone,
        website=body.website,
        address=body.address,
    )
    result = current_domain.process(command, asynchronous=False)
    return VendorIdResponse(vendor_id=result)


@vendor_router.get("/me")
async def my_vendor_profile(caller: Caller = Depends(get_caller)) -> dict:
    vendor_id = caller.require_vendor()
    return current_domain.repository_for(Vendor).get(vendor_id).to_dict()


@vendor_router.put("/me")
async def update_my_vendor_profile(body: UpdateVendorRequest, caller: Caller = Depends(get_caller)) -> dict:
    vendor_id = caller.require_vendor()
    command = UpdateVendorProfile(user_id=vendor_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return current_domain.repository_for(Vendor).get(vendor_id).to_dict()


@vendor_router.get("/me/products")
async def my_vendor_products(caller: Caller = Depends(get_caller)) -> list[dict]:
    vendor_id = caller.require_vendor()
    return [p.to_dict() for p in product_queries.vendor_products(vendor_id)]


@vendor_router.get("/{vendor_id}")
async def public_vendor_profile(vendor_id: str) -> dict:
    return current_domain.repository_for(Vendor).get(vendor_id).to_dict()


@vendor_router.get("/{vendor_id}/products")
async def public_vendor_products(vendor_id: str) -> list[dict]:
    return [p.to_dict() for p in product_queries.vendor_products(vendor_id, active_only=True)]


# --- Likes and wishlist ---


@engagement_router.post("/products/{product_id}/like", response_model=LikesResponse)
async def like_product(product_id: str, caller: Caller = Depends(get_caller)) -> LikesResponse:
    command = LikeProduct(user_id=caller.require_user(), product_id=product_id)
    likes = current_domain.process(command, asynchronous=False)
    return LikesResponse(product_id=product_id, likes=likes)


@engagement_router.delete("/products/{product_id}/like", response_model=LikesResponse)
async def unlike_product(product_id: str, caller: Caller = Depends(get_caller)) -> LikesResponse:
    command = UnlikeProduct(user_id=caller.require_user(), product_id=product_id)
    likes = current_domain.process(command, asynchronous=False)
    return LikesResponse(product_id=product_id, likes=likes)


@engagement_router.get("/wishlist")
async def my_wishlist(caller: Caller = Depends(get_caller)) -> list[dict]:
    entries = wishlist_entries(caller.require_user())
    products = []
    for entry in entries:
        products.extend(product_queries.with_vendor([product_queries.get_product(entry.product_id)]))
    return products


@engagement_router.post("/wishlist/{product_id}", response_model=StatusResponse)
async def add_to_wishlist(product_id: str, caller: Caller = Depends(get_caller)) -> StatusResponse:
    current_domain.process(AddToWishlist(user_id=caller.require_user(), product_id=product_id), asynchronous=False)
    return StatusResponse()


@engagement_router.delete("/wishlist/{product_id}", response_model=StatusResponse)
async def remove_from_wishlist(product_id: str, caller: Caller = Depends(get_caller)) -> StatusResponse:
    command = RemoveFromWishlist(user_id=caller.require_user(), product_id=product_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()

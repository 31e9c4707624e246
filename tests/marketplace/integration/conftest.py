import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from marketplace.api import (
    cart_router,
    engagement_router,
    order_router,
    product_router,
    register_error_handlers,
    vendor_router,
)


@pytest.fixture()
def client():
    app = FastAPI()
    for router in (product_router, engagement_router, order_router, cart_router, vendor_router):
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)


def vendor_headers(vendor_id="vendor-001"):
    return {"X-User-Id": vendor_id, "X-User-Role": "vendor"}


@pytest.fixture()
def create_product(client):
    def _create(vendor_id="vendor-001", **overrides):
        body = {
            "name": "Linen Shirt",
            "brand": "Acme",
            "category": "Shirts",
            "base_price": 40.0,
            "options": [{"name": "Size", "values": ["S", "M"]}],
            "variants": [
                {"options": {"Size": "S"}, "stock": 10},
                {"options": {"Size": "M"}, "stock": 0},
            ],
            "images": [{"url": "https://cdn.example.com/shirt.jpg", "public_id": "shirt"}],
        }
        body.update(overrides)
        response = client.post("/products", json=body, headers=vendor_headers(vendor_id))
        assert response.status_code == 201, response.text
        return response.json()

    return _create

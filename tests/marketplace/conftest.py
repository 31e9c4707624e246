import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield

        from protean import current_domain

        from marketplace.media import reset_media_store

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()
        reset_media_store()


@pytest.fixture()
def shirt_payload():
    """A Size-only product: S in stock, M sold out."""
    return {
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


@pytest.fixture()
def address():
    return {
        "full_name": "Ada Lovelace",
        "street": "1 Main St",
        "city": "Springfield",
        "postal_code": "12345",
        "country": "US",
    }

"""BDD tests for resolving a shopper's option selection to a variant."""

from pytest_bdd import given, parsers, scenarios, then, when

from marketplace.product.resolver import ResolutionStatus, resolve_variant

scenarios("features/variant_selection.feature")


@given(
    parsers.cfparse('a shirt declaring sizes "{first}" and "{second}" priced at {price:g}'),
    target_fixture="product",
)
def shirt(first, second, price):
    return {
        "base_price": price,
        "stock": 0,
        "images": [],
        "options": [{"name": "Size", "values": [first, second]}],
        "variants": [],
    }


@given(parsers.cfparse('the "{size}" variant has {stock:d} in stock'))
def variant_stock(product, size, stock):
    product["variants"].append({"options": {"Size": size}, "stock": stock, "images": []})


@when(parsers.cfparse('the shopper selects size "{size}"'), target_fixture="resolution")
def select_size(product, size):
    return resolve_variant(product, {"Size": size})


@when("the shopper selects nothing", target_fixture="resolution")
def select_nothing(product):
    return resolve_variant(product, {})


@then(parsers.cfparse("the resolved stock is {stock:d}"))
def resolved_stock(resolution, stock):
    assert resolution.stock == stock


@then(parsers.cfparse("the resolved price is {price:g}"))
def resolved_price(resolution, price):
    assert resolution.price == price


@then("the selection is incomplete")
def selection_incomplete(resolution):
    assert resolution.status == ResolutionStatus.INCOMPLETE_SELECTION


@then("purchase is blocked")
def purchase_blocked(resolution):
    assert resolution.purchasable is False


@then("purchase is allowed")
def purchase_allowed(resolution):
    assert resolution.purchasable is True

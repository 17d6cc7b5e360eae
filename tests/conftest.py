"""Shared fixtures: the order/orderItem/customer domain used across tests."""

import pytest

from hateoas_kit import LinkContext, make_resource, to_many, to_one


@pytest.fixture
def context():
    return LinkContext(base_url="/api")


@pytest.fixture
def order():
    return make_resource(
        "order",
        "1",
        {"total": 42},
        [to_many("items", "orderItem", ["a", "b"])],
    )


@pytest.fixture
def items():
    return [make_resource("orderItem", item_id, {"sku": f"SKU-{item_id}"}) for item_id in "ab"]


@pytest.fixture
def customer():
    return make_resource("customer", "c1", {"name": "Ada"})


@pytest.fixture
def loaded_order(items, customer):
    """Order whose items and customer are fully loaded."""
    return make_resource(
        "order",
        "1",
        {"total": 42, "note": None},
        [to_many("items", "orderItem", items), to_one("customer", "customer", customer)],
    )

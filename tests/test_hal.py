"""Tests for HAL encoding."""

import json

from hateoas_kit import (
    HAL,
    ActionLink,
    LinkContext,
    dumps,
    encode,
    make_resource,
    resolve_links,
    to_many,
)


class TestHALEncode:
    def test_order_with_linked_items(self, order, context):
        document = encode(order, resolve_links(order, context), HAL)
        assert document == {
            "total": 42,
            "_links": {
                "self": {"href": "/api/order/1"},
                "items": {"href": "/api/order/1/items"},
            },
        }

    def test_dumps_is_compact(self, order, context):
        body = dumps(encode(order, resolve_links(order, context), "hal"))
        assert isinstance(body, bytes)
        assert body == (
            b'{"total":42,"_links":{"self":{"href":"/api/order/1"},'
            b'"items":{"href":"/api/order/1/items"}}}'
        )

    def test_embedded_relations(self, loaded_order, context):
        link_set = resolve_links(loaded_order, context.with_embed(["items", "customer"]))
        document = encode(loaded_order, link_set, HAL)
        assert document["_links"] == {"self": {"href": "/api/order/1"}}
        assert document["_embedded"]["items"] == [
            {"sku": "SKU-a", "_links": {"self": {"href": "/api/orderItem/a"}}},
            {"sku": "SKU-b", "_links": {"self": {"href": "/api/orderItem/b"}}},
        ]
        assert document["_embedded"]["customer"] == {
            "name": "Ada",
            "_links": {"self": {"href": "/api/customer/c1"}},
        }
        assert document["note"] is None

    def test_relation_is_never_both_linked_and_embedded(self, loaded_order, context):
        document = encode(loaded_order, resolve_links(loaded_order, context.with_embed(["items"])), HAL)
        assert "items" not in document["_links"]
        assert "customer" in document["_links"]
        assert "customer" not in document["_embedded"]

    def test_empty_embedded_to_many_is_an_empty_list(self, context):
        resource = make_resource("order", "3", relationships=[to_many("items", "orderItem", [], loaded=True)])
        document = encode(resource, resolve_links(resource, context.with_embed(["items"])), HAL)
        assert document["_embedded"] == {"items": []}

    def test_reserved_attribute_names_are_dropped(self, context, caplog):
        resource = make_resource("order", "1", {"_links": "oops", "total": 1})
        with caplog.at_level("WARNING", logger="hateoas_kit.formats.hal"):
            document = encode(resource, resolve_links(resource, context), HAL)
        assert document["_links"] == {"self": {"href": "/api/order/1"}}
        assert "reserved HAL member" in caplog.text

    def test_action_links_carry_method(self, order):
        context = LinkContext(base_url="/api", actions={"order": (ActionLink("cancel", "cancel"),)})
        document = encode(order, resolve_links(order, context), HAL)
        assert document["_links"]["cancel"] == {"href": "/api/order/1/cancel", "method": "POST"}

    def test_output_is_json_serializable(self, loaded_order, context):
        document = encode(loaded_order, resolve_links(loaded_order, context.with_embed(["items"])), HAL)
        assert json.loads(dumps(document)) == document

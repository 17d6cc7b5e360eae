"""Tests for link resolution."""

import pytest

from hateoas_kit import (
    ActionLink,
    InvalidResourceError,
    LinkContext,
    PageCursor,
    UnresolvableRelationError,
    make_resource,
    resolve_collection_links,
    resolve_links,
    to_one,
)
from hateoas_kit.core.links import LinkMode, identity_from_href


class TestResolveLinks:
    def test_self_and_related_links(self, order, context):
        link_set = resolve_links(order, context)
        assert link_set.self_link.href == "/api/order/1"
        assert link_set.relation("items").link.href == "/api/order/1/items"
        assert list(link_set.links()) == ["self", "items"]

    def test_same_input_gives_same_output(self, order, context):
        first = resolve_links(order, context)
        second = resolve_links(order, context)
        assert first == second
        assert first.to_json() == second.to_json()

    def test_relation_without_targets_still_has_link(self, context):
        resource = make_resource("order", "2", relationships=[to_one("customer", "customer", None)])
        link_set = resolve_links(resource, context)
        assert "customer" in link_set
        assert link_set.get("customer").href == "/api/order/2/customer"

    def test_undeclared_relation_has_no_link(self, order, context):
        assert "customer" not in resolve_links(order, context)

    def test_embed_undeclared_relation_raises(self, order, context):
        with pytest.raises(UnresolvableRelationError) as info:
            resolve_links(order, context.with_embed(["customer"]))
        assert info.value.relation == "customer"
        assert info.value.resource_type == "order"

    def test_embed_loaded_relation(self, loaded_order, context):
        link_set = resolve_links(loaded_order, context.with_embed(["items"]))
        items = link_set.relation("items")
        assert items.mode is LinkMode.EMBED
        assert [target.resource.id for target in items.embedded] == ["a", "b"]
        assert items.embedded[0].links.self_link.href == "/api/orderItem/a"
        assert link_set.relation("customer").mode is LinkMode.LINK

    def test_embed_unloaded_relation_falls_back_to_link(self, order, context):
        link_set = resolve_links(order, context.with_embed(["items"]))
        assert link_set.relation("items").mode is LinkMode.LINK

    def test_link_only_wins_over_embed(self, loaded_order):
        context = LinkContext(base_url="/api", embed={"items"}, link_only={"items"})
        link_set = resolve_links(loaded_order, context)
        assert link_set.relation("items").mode is LinkMode.LINK

    def test_ids_are_percent_encoded(self, context):
        resource = make_resource("file", "a/b c")
        assert resolve_links(resource, context).self_link.href == "/api/file/a%2Fb%20c"

    def test_action_links(self, order):
        context = LinkContext(
            base_url="/api", actions={"order": (ActionLink("cancel", "cancel", title="Cancel"),)}
        )
        link = resolve_links(order, context).get("cancel")
        assert link.href == "/api/order/1/cancel"
        assert link.method == "POST"
        assert link.title == "Cancel"

    @pytest.mark.parametrize("rel", ["items", "self"])
    def test_action_colliding_with_link_raises(self, order, rel):
        context = LinkContext(base_url="/api", actions={"order": (ActionLink(rel, "do"),)})
        with pytest.raises(InvalidResourceError) as exc_info:
            resolve_links(order, context)
        assert exc_info.value.relation == rel

    def test_as_dict_lists_embedded_targets(self, loaded_order, context):
        view = resolve_links(loaded_order, context.with_embed(["customer"])).as_dict()
        assert view["links"]["customer"] == {"href": "/api/order/1/customer"}
        assert view["embedded"]["customer"] == [
            {"type": "customer", "id": "c1", "links": {"self": {"href": "/api/customer/c1"}}}
        ]


class TestLinkContext:
    def test_nested_strips_prefix(self):
        context = LinkContext(embed={"items", "items.product", "customer"}, link_only={"items.order"})
        nested = context.nested("items")
        assert nested.embed == frozenset({"product"})
        assert nested.link_only == frozenset({"order"})

    def test_top_level_embed(self):
        context = LinkContext(embed={"items.product", "customer"})
        assert context.top_level_embed == {"items", "customer"}

    def test_base_url_trailing_slash_is_dropped(self):
        assert LinkContext(base_url="/api/").resource_url("order", "1") == "/api/order/1"

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValueError):
            LinkContext(page_size=0)

    def test_default_cursor_uses_page_size(self):
        assert LinkContext(page_size=3).page_cursor == PageCursor(offset=0, limit=3)


class TestCollectionLinks:
    def test_first_page(self, context):
        link_set = resolve_collection_links(
            "/api/order/1/items", context.with_cursor(PageCursor(0, 2)), total=5
        )
        assert link_set.self_link.href == "/api/order/1/items?page%5Boffset%5D=0&page%5Blimit%5D=2"
        pagination = dict(link_set.pagination)
        assert set(pagination) == {"first", "last", "next"}
        assert pagination["last"].href.endswith("page%5Boffset%5D=4&page%5Blimit%5D=2")
        assert pagination["next"].href.endswith("page%5Boffset%5D=2&page%5Blimit%5D=2")

    def test_last_page(self, context):
        link_set = resolve_collection_links(
            "/api/order/1/items", context.with_cursor(PageCursor(4, 2)), total=5
        )
        pagination = dict(link_set.pagination)
        assert "next" not in pagination
        assert pagination["prev"].href.endswith("page%5Boffset%5D=2&page%5Blimit%5D=2")
        assert pagination["last"].href == link_set.self_link.href

    def test_unknown_total_has_no_last(self, context):
        link_set = resolve_collection_links(
            "/api/order/1/items", context.with_cursor(PageCursor(0, 2)), has_more=True
        )
        pagination = dict(link_set.pagination)
        assert "last" not in pagination
        assert "next" in pagination

    def test_custom_pagination_names(self):
        context = LinkContext(
            pagination_names={"first": "start", "prev": "previous", "next": "forward", "last": "end"},
            cursor=PageCursor(2, 2),
        )
        link_set = resolve_collection_links("/items", context, total=10)
        assert [name for name, _ in link_set.pagination] == ["start", "end", "previous", "forward"]

    def test_other_query_parameters_are_kept(self, context):
        link_set = resolve_collection_links("/api/order?sort=total", context, total=1)
        assert link_set.self_link.href.startswith("/api/order?sort=total&")


@pytest.mark.parametrize(
    "href, expected",
    [
        ("/api/order/1", ("order", "1")),
        ("http://example.com/api/order/1/", ("order", "1")),
        ("/api/file/a%2Fb", ("file", "a/b")),
        ("/order", None),
    ],
)
def test_identity_from_href(href, expected):
    assert identity_from_href(href) == expected

"""End-to-end traversal against a FastAPI app serving represented resources."""

import asyncio

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import Response
from fastapi.testclient import TestClient

from hateoas_kit import (
    HAL,
    JSONAPI,
    FetchError,
    HypermediaError,
    InMemoryDataLayer,
    LinkContext,
    RequestsTransport,
    ResourceRepresenter,
    TraversalSession,
    UnsupportedFormatError,
    dumps,
    make_resource,
    negotiate_format,
    to_many,
    to_one,
)


ITEMS = [make_resource("orderItem", item_id, {"sku": item_id.upper()}) for item_id in "abcde"]
CUSTOMER = make_resource("customer", "c1", {"name": "Ada"})
ORDER = make_resource(
    "order",
    "1",
    {"total": 42},
    [to_many("items", "orderItem", [item.id for item in ITEMS]), to_one("customer", "customer", "c1")],
)


def create_app():
    representer = ResourceRepresenter(
        InMemoryDataLayer([ORDER, CUSTOMER, *ITEMS]),
        LinkContext(base_url="/api", page_size=2),
    )
    app = FastAPI()

    @app.exception_handler(HypermediaError)
    async def hypermedia_error_handler(request: Request, exc: HypermediaError):
        try:
            wire_format = negotiate_format(request.headers.get("accept"))
        except UnsupportedFormatError:
            wire_format = JSONAPI
        return Response(
            dumps(representer.render_error(exc, wire_format)),
            status_code=int(exc.status),
            media_type=wire_format.media_type,
        )

    @app.get("/api/{resource_type}/{resource_id}")
    def read_resource(resource_type: str, resource_id: str, request: Request):
        wire_format = negotiate_format(request.headers.get("accept"))
        context = representer.context_from_query(request.query_params)
        document = representer.represent(resource_type, resource_id, wire_format, context=context)
        return Response(dumps(document), media_type=wire_format.media_type)

    @app.get("/api/{resource_type}/{resource_id}/{relation}")
    def read_related(resource_type: str, resource_id: str, relation: str, request: Request):
        wire_format = negotiate_format(request.headers.get("accept"))
        context = representer.context_from_query(request.query_params)
        document = representer.represent_related(
            resource_type, resource_id, relation, wire_format, context=context
        )
        return Response(dumps(document), media_type=wire_format.media_type)

    return app


@pytest.fixture
def client():
    return TestClient(create_app())


@pytest.fixture
def transport(client):
    return RequestsTransport(base_url="http://testserver", session=client, timeout=None)


class TestServedDocuments:
    def test_content_negotiation(self, client):
        response = client.get("/api/order/1", headers={"Accept": "application/hal+json"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/hal+json")
        assert response.json()["_links"]["items"] == {"href": "/api/order/1/items"}

    def test_include_query_parameter(self, client):
        response = client.get("/api/order/1?include=customer", headers={"Accept": "application/vnd.api+json"})
        assert response.json()["included"] == [
            {"type": "customer", "id": "c1", "attributes": {"name": "Ada"}}
        ]

    def test_error_document(self, client):
        response = client.get("/api/order/404", headers={"Accept": "application/vnd.api+json"})
        assert response.status_code == 404
        assert response.json()["errors"][0]["code"] == "resource_not_found"

    def test_unsupported_accept(self, client):
        response = client.get("/api/order/1", headers={"Accept": "text/html"})
        assert response.status_code == 406


@pytest.mark.parametrize("wire_format", [JSONAPI, HAL])
class TestTraversal:
    def test_follow_and_page(self, transport, wire_format):
        session = TraversalSession(transport, wire_format)

        async def scenario():
            order = await session.fetch("/api/order/1")
            customer = await session.follow(order, "customer")
            items = [item async for item in session.iter_pages(order, "items")]
            return order, customer, items

        order, customer, items = asyncio.run(scenario())
        assert order.attributes == {"total": 42}
        assert customer == CUSTOMER
        assert items == ITEMS

    def test_http_errors_become_fetch_errors(self, transport, wire_format):
        session = TraversalSession(transport, wire_format)
        with pytest.raises(FetchError) as info:
            asyncio.run(session.fetch("/api/order/404"))
        assert info.value.__cause__.status == 404

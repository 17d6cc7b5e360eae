"""Tests for the error taxonomy and error documents."""

import pytest

from hateoas_kit import (
    ErrorDocumentBuilder,
    FetchError,
    FetchTimeoutError,
    HypermediaError,
    MalformedDocumentError,
    RelationNotFoundError,
    UnresolvableRelationError,
)
from hateoas_kit.formats import error_document


class TestErrors:
    def test_context_holds_known_fields(self):
        exc = RelationNotFoundError("no link", resource_type="order", resource_id="1", relation="invoice")
        assert exc.context == {"type": "order", "id": "1", "relation": "invoice"}
        assert str(exc) == "no link"
        assert isinstance(exc, KeyError)

    def test_fetch_error_context_has_url(self):
        exc = FetchError("down", url="/api/order/1", format="hal")
        assert exc.context == {"format": "hal", "url": "/api/order/1"}

    def test_timeout_is_a_fetch_error(self):
        exc = FetchTimeoutError("slow", url="/x")
        assert isinstance(exc, FetchError)
        assert isinstance(exc, TimeoutError)
        assert exc.status == "504"

    def test_everything_is_a_hypermedia_error(self):
        assert issubclass(MalformedDocumentError, HypermediaError)
        assert issubclass(MalformedDocumentError, ValueError)


class TestErrorDocuments:
    def test_jsonapi_document(self):
        exc = UnresolvableRelationError(
            "Cannot embed undeclared relation 'invoice'.",
            resource_type="order",
            resource_id="1",
            relation="invoice",
        )
        assert error_document(exc, "jsonapi") == {
            "errors": [
                {
                    "status": "400",
                    "code": "unresolvable_relation",
                    "title": "Unresolvable Relation",
                    "detail": "Cannot embed undeclared relation 'invoice'.",
                    "source": {"pointer": "/data/relationships/invoice"},
                    "meta": {"type": "order", "id": "1", "relation": "invoice"},
                }
            ]
        }

    def test_hal_document(self):
        exc = MalformedDocumentError("bad json", format="hal")
        assert error_document(exc, "hal") == {
            "message": "bad json",
            "logref": "malformed_document",
            "format": "hal",
        }

    def test_several_errors(self):
        builder = ErrorDocumentBuilder()
        document = builder.jsonapi_document(MalformedDocumentError("a"), MalformedDocumentError("b"))
        assert [error["detail"] for error in document["errors"]] == ["a", "b"]
        assert "meta" not in document["errors"][0]

    def test_error_object_keeps_only_set_members(self):
        error = ErrorDocumentBuilder().error_object(status="404", detail="Missing", source=None)
        assert error == {"status": "404", "detail": "Missing"}

    def test_error_object_needs_a_field(self):
        with pytest.raises(ValueError):
            ErrorDocumentBuilder().error_object()

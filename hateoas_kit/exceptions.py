"""Error taxonomy for hypermedia representation and traversal."""

from __future__ import annotations

from typing import Any


class HypermediaError(Exception):
    """Base class for every error raised by the library.

    Errors carry the offending resource type, id, relation and format name
    (when known) so clients can report precisely what failed.
    """

    code: str = "hypermedia_error"
    title: str = "Hypermedia Error"
    status: str = "500"

    def __init__(
        self,
        message: str,
        *,
        resource_type: str | None = None,
        resource_id: str | None = None,
        relation: str | None = None,
        format: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.relation = relation
        self.format = format

    @property
    def context(self) -> dict[str, Any]:
        """Return the identifying fields that are set on this error."""
        values = {
            "type": self.resource_type,
            "id": self.resource_id,
            "relation": self.relation,
            "format": self.format,
        }
        return {key: value for key, value in values.items() if value is not None}


class InvalidResourceError(HypermediaError, ValueError):
    code = "invalid_resource"
    title = "Invalid Resource"
    status = "400"


class UnresolvableRelationError(HypermediaError, KeyError):
    """A relation requested for embedding is not declared on the resource."""

    code = "unresolvable_relation"
    title = "Unresolvable Relation"
    status = "400"

    def __str__(self) -> str:
        return self.message


class RelationNotFoundError(HypermediaError, KeyError):
    """A relation to follow is absent from the resource's links."""

    code = "relation_not_found"
    title = "Relation Not Found"
    status = "404"

    def __str__(self) -> str:
        return self.message


class UnsupportedFormatError(HypermediaError, ValueError):
    code = "unsupported_format"
    title = "Unsupported Format"
    status = "406"


class MalformedDocumentError(HypermediaError, ValueError):
    code = "malformed_document"
    title = "Malformed Document"
    status = "422"


class ResourceNotFoundError(HypermediaError, LookupError):
    code = "resource_not_found"
    title = "Resource Not Found"
    status = "404"


class FetchError(HypermediaError):
    """Transport failure while following a link; the cause is preserved."""

    code = "fetch_failed"
    title = "Fetch Failed"
    status = "502"

    def __init__(self, message: str, *, url: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.url = url

    @property
    def context(self) -> dict[str, Any]:
        values = super().context
        if self.url is not None:
            values["url"] = self.url
        return values


class FetchTimeoutError(FetchError, TimeoutError):
    """A fetch exceeded the caller-supplied deadline."""

    code = "fetch_timeout"
    title = "Fetch Timeout"
    status = "504"


class UnboundedTraversalError(HypermediaError):
    """Paging cannot terminate: no last page reported and no predicate given."""

    code = "unbounded_traversal"
    title = "Unbounded Traversal"
    status = "400"

"""Hypermedia link resolution, HAL and JSON:API representation, and traversal."""

from .config import HypermediaSettings
from .core import (
    ActionLink,
    Cardinality,
    ErrorDocumentBuilder,
    Link,
    LinkContext,
    LinkSet,
    RelationshipRef,
    Resource,
    make_resource,
    resolve_collection_links,
    resolve_links,
    to_many,
    to_one,
)
from .datalayer import DataAccess, InMemoryDataLayer
from .exceptions import (
    FetchError,
    FetchTimeoutError,
    HypermediaError,
    InvalidResourceError,
    MalformedDocumentError,
    RelationNotFoundError,
    ResourceNotFoundError,
    UnboundedTraversalError,
    UnresolvableRelationError,
    UnsupportedFormatError,
)
from .formats import (
    HAL,
    JSONAPI,
    DecodedCollection,
    DecodedDocument,
    WireFormat,
    decode,
    decode_collection,
    detect_format,
    dumps,
    encode,
    encode_collection,
    get_format,
    negotiate_format,
)
from .pagination import PageCursor
from .representers import ResourceRepresenter
from .traversal import RequestsTransport, ResourceCache, TransportError, TraversalSession

__all__ = [
    "ActionLink",
    "Cardinality",
    "DataAccess",
    "DecodedCollection",
    "DecodedDocument",
    "ErrorDocumentBuilder",
    "FetchError",
    "FetchTimeoutError",
    "HAL",
    "HypermediaError",
    "HypermediaSettings",
    "InMemoryDataLayer",
    "InvalidResourceError",
    "JSONAPI",
    "Link",
    "LinkContext",
    "LinkSet",
    "MalformedDocumentError",
    "PageCursor",
    "RelationNotFoundError",
    "RelationshipRef",
    "RequestsTransport",
    "Resource",
    "ResourceCache",
    "ResourceNotFoundError",
    "ResourceRepresenter",
    "TransportError",
    "TraversalSession",
    "UnboundedTraversalError",
    "UnresolvableRelationError",
    "UnsupportedFormatError",
    "WireFormat",
    "decode",
    "decode_collection",
    "detect_format",
    "dumps",
    "encode",
    "encode_collection",
    "get_format",
    "make_resource",
    "negotiate_format",
    "resolve_collection_links",
    "resolve_links",
    "to_many",
    "to_one",
]

"""Core resource model, link resolution, and document helpers."""

from .document import HALDocumentBuilder, JSONAPIDocumentBuilder
from .errors import ErrorDocumentBuilder
from .links import (
    ActionLink,
    EmbeddedTarget,
    LinkContext,
    LinkMode,
    LinkSet,
    RelationLinkage,
    resolve_collection_links,
    resolve_links,
)
from .resource import Cardinality, Link, RelationshipRef, Resource, make_resource, to_many, to_one

__all__ = [
    "ActionLink",
    "Cardinality",
    "EmbeddedTarget",
    "ErrorDocumentBuilder",
    "HALDocumentBuilder",
    "JSONAPIDocumentBuilder",
    "Link",
    "LinkContext",
    "LinkMode",
    "LinkSet",
    "RelationLinkage",
    "RelationshipRef",
    "Resource",
    "make_resource",
    "resolve_collection_links",
    "resolve_links",
    "to_many",
    "to_one",
]

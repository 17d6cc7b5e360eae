"""JSON:API (``application/vnd.api+json``) encoding and decoding.

Embedded targets are emitted once each in a flat top-level ``included``
array, never nested, and never repeating the primary data.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from pydantic import ValidationError

from hateoas_kit.core.document import JSONAPIDocumentBuilder
from hateoas_kit.core.errors import ErrorDocumentBuilder
from hateoas_kit.core.links import SELF, EmbeddedTarget, LinkSet
from hateoas_kit.core.resource import Cardinality, Link, RelationshipRef, Resource, make_resource
from hateoas_kit.exceptions import HypermediaError, InvalidResourceError, MalformedDocumentError
from hateoas_kit.schemas import (
    JSONAPIDocument,
    JSONAPIErrorDocument,
    JSONAPIRelationship,
    JSONAPIResource,
)

from .base import DecodedCollection, DecodedDocument, ResourceIndex, load_document, validation_error


NAME = "jsonapi"
MEDIA_TYPE = "application/vnd.api+json"


def encode(
    resource: Resource, link_set: LinkSet, *, resource_links: bool = False, **_options: Any
) -> dict[str, Any]:
    """Encode a resource and its resolved links as a JSON:API document.

    Resource-level ``links`` are written when the link set has action links,
    or for ``self`` when ``resource_links`` is true.
    """
    included = ResourceIndex(exclude=[resource.key])
    data = _resource_object(resource, link_set, included, resource_links)
    return JSONAPIDocumentBuilder().build_single(data, included=included.values())


def encode_collection(
    resources: Sequence[Resource],
    link_sets: Sequence[LinkSet],
    collection_links: LinkSet,
    *,
    meta: Mapping[str, Any] | None = None,
    resource_links: bool = False,
    **_options: Any,
) -> dict[str, Any]:
    """Encode a collection page with pagination under top-level ``links``."""
    included = ResourceIndex(exclude=[resource.key for resource in resources])
    data = [
        _resource_object(resource, links, included, resource_links)
        for resource, links in zip(resources, link_sets)
    ]
    links = {SELF: _link_value(collection_links.self_link)}
    links.update((name, _link_value(link)) for name, link in collection_links.pagination)
    return JSONAPIDocumentBuilder().build_collection(
        data, included=included.values(), links=links, meta=meta
    )


def _resource_object(
    resource: Resource, link_set: LinkSet, included: ResourceIndex, resource_links: bool
) -> dict[str, Any]:
    obj: dict[str, Any] = {"type": resource.type, "id": resource.id}
    if resource.attributes:
        obj["attributes"] = dict(resource.attributes)

    relationships: dict[str, Any] = {}
    for linkage in link_set.relations:
        relationship: dict[str, Any] = {"links": {"related": linkage.link.href}}
        if linkage.relationship.cardinality is not None:
            relationship["data"] = _linkage_data(linkage.relationship)
        relationships[linkage.name] = relationship
        _include(linkage.embedded, included, resource_links)
    if relationships:
        obj["relationships"] = relationships

    links: dict[str, Any] = {}
    if resource_links:
        links[SELF] = link_set.self_link.href
    links.update((name, _link_value(link)) for name, link in link_set.actions)
    if links:
        obj["links"] = links
    return obj


def _include(
    targets: Sequence[EmbeddedTarget], included: ResourceIndex, resource_links: bool
) -> None:
    """Add embedded targets to ``included``, walking deeper embeds of repeated targets."""
    for target in targets:
        key = target.resource.key
        if included.reserve(key):
            included.set(key, _resource_object(target.resource, target.links, included, resource_links))
            continue
        for linkage in target.links.relations:
            _include(linkage.embedded, included, resource_links)


def _linkage_data(ref: RelationshipRef) -> Any:
    identifiers = [{"type": type_, "id": id_} for type_, id_ in ref.identifiers()]
    if ref.cardinality is Cardinality.MANY:
        return identifiers
    return identifiers[0] if identifiers else None


def _link_value(link: Link) -> Any:
    """Return a bare href, or a link object when metadata is present."""
    if link.method is None and link.type is None and link.title is None:
        return link.href
    value: dict[str, Any] = {"href": link.href}
    if link.title is not None:
        value["title"] = link.title
    if link.type is not None:
        value["type"] = link.type
    if link.method is not None:
        value["meta"] = {"method": link.method}
    return value


def decode(
    document: Any,
    *,
    cardinalities: Mapping[str, Cardinality] | None = None,
    **_options: Any,
) -> DecodedDocument:
    """Decode a JSON:API single-resource document."""
    parsed = _parse(document)
    if not isinstance(parsed.data, JSONAPIResource):
        raise MalformedDocumentError(
            "Primary data must be a single resource object.", format=NAME
        )
    decoder = _Decoder(parsed, cardinalities or {})
    resource = decoder.resource(parsed.data, fallback_self=_top_level_self(parsed))
    return DecodedDocument(resource=resource, included=decoder.included(exclude={resource.key}))


def decode_collection(
    document: Any,
    *,
    cardinalities: Mapping[str, Cardinality] | None = None,
    **_options: Any,
) -> DecodedCollection:
    """Decode a JSON:API collection document."""
    parsed = _parse(document)
    if not isinstance(parsed.data, list):
        raise MalformedDocumentError("Primary data must be an array of resources.", format=NAME)
    decoder = _Decoder(parsed, cardinalities or {})
    resources = tuple(decoder.resource(item) for item in parsed.data)
    links = {
        name: link
        for name, link in ((name, _parse_link(value)) for name, value in (parsed.links or {}).items())
        if link is not None
    }
    return DecodedCollection(
        resources=resources,
        included=decoder.included(exclude={resource.key for resource in resources}),
        links=links,
        meta=dict(parsed.meta or {}),
    )


def error_document(exc: HypermediaError) -> dict[str, Any]:
    return ErrorDocumentBuilder().jsonapi_document(exc)


def recognizes(document: Mapping[str, Any]) -> bool:
    return "data" in document or "errors" in document


def _parse(document: Any) -> JSONAPIDocument:
    raw = load_document(document, format_name=NAME)
    if "data" not in raw and "errors" in raw:
        raise MalformedDocumentError(_error_summary(raw), format=NAME)
    if "data" not in raw:
        raise MalformedDocumentError("Document has no top-level 'data' member.", format=NAME)
    try:
        return JSONAPIDocument.model_validate(raw)
    except ValidationError as exc:
        raise validation_error(exc, format_name=NAME, what="JSON:API document") from exc


def _error_summary(raw: Mapping[str, Any]) -> str:
    try:
        errors = JSONAPIErrorDocument.model_validate(raw).errors
    except ValidationError as exc:
        raise validation_error(exc, format_name=NAME, what="JSON:API error document") from exc
    details = "; ".join(
        str(error.get("detail") or error.get("title") or error.get("code") or "unknown error")
        for error in errors
    )
    return f"Document carries errors instead of data: {details}"


def _parse_link(value: Any) -> Link | None:
    if isinstance(value, str):
        return Link(value)
    if isinstance(value, Mapping) and isinstance(value.get("href"), str):
        meta = value.get("meta") or {}
        return Link(
            href=value["href"],
            method=meta.get("method") if isinstance(meta, Mapping) else None,
            type=value.get("type"),
            title=value.get("title"),
        )
    return None


def _top_level_self(parsed: JSONAPIDocument) -> Link | None:
    return _parse_link((parsed.links or {}).get(SELF))


class _Decoder:
    """Decode resource objects, attaching included targets one level deep."""

    def __init__(self, parsed: JSONAPIDocument, cardinalities: Mapping[str, Cardinality]) -> None:
        self.cardinalities = cardinalities
        self.shallow: dict[tuple[str, str], Resource] = {}
        self.raw_included = list(parsed.included or [])
        for item in self.raw_included:
            resource = self._build(item, resolve=False)
            self.shallow.setdefault(resource.key, resource)

    def included(self, *, exclude: set[tuple[str, str]]) -> tuple[Resource, ...]:
        index = ResourceIndex(exclude=exclude)
        for item in self.raw_included:
            key = (item.type, item.id)
            if index.reserve(key):
                index.set(key, self._build(item, resolve=True))
        return tuple(index.values())

    def resource(self, item: JSONAPIResource, *, fallback_self: Link | None = None) -> Resource:
        return self._build(item, resolve=True, fallback_self=fallback_self)

    def _build(
        self, item: JSONAPIResource, *, resolve: bool, fallback_self: Link | None = None
    ) -> Resource:
        links: dict[str, Link] = {}
        for name, value in (item.links or {}).items():
            link = _parse_link(value)
            if link is not None:
                links[name] = link
        if SELF not in links and fallback_self is not None:
            links[SELF] = fallback_self

        relationships = []
        for name, raw in (item.relationships or {}).items():
            related = _parse_link((raw.links or {}).get("related"))
            if related is not None:
                links.setdefault(name, related)
            relationships.append(self._relationship(name, raw, resolve))

        try:
            return make_resource(item.type, item.id, item.attributes or {}, relationships, links=links)
        except InvalidResourceError as exc:
            raise MalformedDocumentError(
                exc.message,
                format=NAME,
                resource_type=item.type,
                resource_id=item.id,
                relation=exc.relation,
            ) from exc

    def _relationship(self, name: str, raw: JSONAPIRelationship, resolve: bool) -> RelationshipRef:
        if not raw.has_data:
            return RelationshipRef(name, None, None, self.cardinalities.get(name))
        if raw.data is None:
            return RelationshipRef(name, None, (), Cardinality.ONE)
        if isinstance(raw.data, list):
            identifiers = raw.data
            cardinality = Cardinality.MANY
        else:
            identifiers = [raw.data]
            cardinality = Cardinality.ONE
        target_type = identifiers[0].type if identifiers else None
        ids = tuple(identifier.id for identifier in identifiers)
        resources = None
        if resolve and identifiers:
            found = [self.shallow.get((identifier.type, identifier.id)) for identifier in identifiers]
            if all(target is not None for target in found):
                resources = tuple(found)
        return RelationshipRef(name, target_type, ids, cardinality, resources)

"""HAL (``application/hal+json``) encoding and decoding.

Attributes are flattened into the resource object, link-only relations go to
``_links`` and embedded relations to ``_embedded``. A relation name appears in
exactly one of the two. HAL carries no explicit type or id, so decoding
derives them from the last two path segments of ``_links.self``.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from pydantic import ValidationError

from hateoas_kit.core.document import HALDocumentBuilder
from hateoas_kit.core.errors import ErrorDocumentBuilder
from hateoas_kit.core.links import SELF, LinkSet, identity_from_href
from hateoas_kit.core.resource import Cardinality, Link, RelationshipRef, Resource, make_resource
from hateoas_kit.exceptions import HypermediaError, InvalidResourceError, MalformedDocumentError
from hateoas_kit.schemas import HALLink, HALResource

from .base import DecodedCollection, DecodedDocument, ResourceIndex, load_document, validation_error


logger = logging.getLogger(__name__)

NAME = "hal"
MEDIA_TYPE = "application/hal+json"
RESERVED = frozenset({"_links", "_embedded"})


def encode(resource: Resource, link_set: LinkSet, **_options: Any) -> dict[str, Any]:
    """Encode a resource and its resolved links as a HAL document."""
    return _encode_resource(resource, link_set)


def _encode_resource(resource: Resource, link_set: LinkSet) -> dict[str, Any]:
    state: dict[str, Any] = {}
    for key, value in resource.attributes.items():
        if key in RESERVED:
            logger.warning(
                "Dropping attribute %r of %s/%s: reserved HAL member", key, resource.type, resource.id
            )
            continue
        state[key] = value

    links: dict[str, Any] = {SELF: link_set.self_link.as_dict()}
    links.update((name, link.as_dict()) for name, link in link_set.actions)
    embedded: dict[str, Any] = {}
    for linkage in link_set.relations:
        if not linkage.is_embedded:
            links[linkage.name] = linkage.link.as_dict()
            continue
        documents = [_encode_resource(target.resource, target.links) for target in linkage.embedded]
        if linkage.relationship.cardinality is Cardinality.ONE:
            embedded[linkage.name] = documents[0] if documents else None
        else:
            embedded[linkage.name] = documents
    links.update((name, link.as_dict()) for name, link in link_set.pagination)
    return HALDocumentBuilder().build_single(state, links=links, embedded=embedded)


def encode_collection(
    resources: Sequence[Resource],
    link_sets: Sequence[LinkSet],
    collection_links: LinkSet,
    *,
    name: str | None = None,
    meta: Mapping[str, Any] | None = None,
    **_options: Any,
) -> dict[str, Any]:
    """Encode a collection page with items under ``_embedded[name]``."""
    items = [_encode_resource(resource, links) for resource, links in zip(resources, link_sets)]
    links = {SELF: collection_links.self_link.as_dict()}
    links.update((rel, link.as_dict()) for rel, link in collection_links.pagination)
    collection_name = name or (resources[0].type if resources else "items")
    return HALDocumentBuilder().build_collection(collection_name, items, links=links, meta=meta)


def decode(
    document: Any,
    *,
    cardinalities: Mapping[str, Cardinality] | None = None,
    **_options: Any,
) -> DecodedDocument:
    """Decode a HAL resource document.

    Link-only relations do not carry cardinality in HAL; ``cardinalities``
    supplies it per relation name.
    """
    raw = load_document(document, format_name=NAME)
    decoder = _Decoder(cardinalities or {})
    resource = decoder.resource(raw)
    included = [item for item in decoder.index.values() if item.key != resource.key]
    return DecodedDocument(resource=resource, included=tuple(included))


def decode_collection(
    document: Any,
    *,
    name: str | None = None,
    cardinalities: Mapping[str, Cardinality] | None = None,
    **_options: Any,
) -> DecodedCollection:
    """Decode a HAL collection page."""
    raw = load_document(document, format_name=NAME)
    links = _validated_links(raw)
    embedded = raw.get("_embedded") or {}
    if not isinstance(embedded, Mapping):
        raise MalformedDocumentError("_embedded must be an object.", format=NAME)
    if name is None:
        if len(embedded) > 1:
            raise MalformedDocumentError(
                f"Ambiguous collection: _embedded has {sorted(embedded)}; pass name.",
                format=NAME,
            )
        name = next(iter(embedded), None)
    items = embedded.get(name, []) if name is not None else []
    if not isinstance(items, list):
        raise MalformedDocumentError(
            f"_embedded.{name} must be an array in a collection.", format=NAME, relation=name
        )
    decoder = _Decoder(cardinalities or {})
    resources = tuple(decoder.resource(item) for item in items)
    primary = {resource.key for resource in resources}
    included = tuple(item for item in decoder.index.values() if item.key not in primary)
    meta = _state(raw)
    return DecodedCollection(resources=resources, included=included, links=links, meta=meta)


def error_document(exc: HypermediaError) -> dict[str, Any]:
    return ErrorDocumentBuilder().hal_document(exc)


def recognizes(document: Mapping[str, Any]) -> bool:
    return "_links" in document


def _state(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Return state properties: every member except _links and _embedded."""
    return {key: value for key, value in raw.items() if key not in RESERVED}


def _to_link(value: HALLink | list[HALLink]) -> Link:
    link = value[0] if isinstance(value, list) else value
    return Link(
        href=link.href,
        method=link.method,
        type=link.type,
        title=link.title,
        templated=link.templated,
    )


def _validated_links(raw: Mapping[str, Any]) -> dict[str, Link]:
    try:
        parsed = HALResource.model_validate(raw)
    except ValidationError as exc:
        raise validation_error(exc, format_name=NAME, what="HAL document") from exc
    return {
        name: _to_link(value)
        for name, value in parsed.links.items()
        if not (isinstance(value, list) and not value)
    }


class _Decoder:
    def __init__(self, cardinalities: Mapping[str, Cardinality]) -> None:
        self.cardinalities = cardinalities
        self.index = ResourceIndex()

    def resource(self, raw: Any) -> Resource:
        if not isinstance(raw, Mapping):
            raise MalformedDocumentError("HAL resource must be a JSON object.", format=NAME)
        try:
            parsed = HALResource.model_validate(raw)
        except ValidationError as exc:
            raise validation_error(exc, format_name=NAME, what="HAL resource") from exc

        self_link = _to_link(parsed.links[SELF])
        identity = identity_from_href(self_link.href)
        if identity is None:
            raise MalformedDocumentError(
                f"Cannot determine type and id from self link {self_link.href!r}.", format=NAME
            )
        resource_type, resource_id = identity

        links: dict[str, Link] = {}
        relationships: list[RelationshipRef] = []
        embedded = parsed.embedded or {}
        for name, value in parsed.links.items():
            if isinstance(value, list) and not value:
                continue
            link = _to_link(value)
            links[name] = link
            if name == SELF or name in embedded or link.method not in (None, "GET"):
                continue
            relationships.append(RelationshipRef(name, None, None, self.cardinalities.get(name)))

        for name, value in embedded.items():
            relationships.append(self._embedded_relationship(name, value, resource_type, resource_id))

        try:
            resource = make_resource(
                resource_type,
                resource_id,
                _state(raw),
                relationships,
                links=links,
            )
        except InvalidResourceError as exc:
            raise MalformedDocumentError(
                exc.message, format=NAME, resource_type=resource_type, resource_id=resource_id
            ) from exc
        self.index.setdefault(resource.key, resource)
        return resource

    def _embedded_relationship(
        self, name: str, value: Any, resource_type: str, resource_id: str
    ) -> RelationshipRef:
        if value is None:
            return RelationshipRef(name, None, (), Cardinality.ONE, ())
        if isinstance(value, list):
            targets = tuple(self.resource(item) for item in value)
            cardinality = Cardinality.MANY
        elif isinstance(value, Mapping):
            targets = (self.resource(value),)
            cardinality = Cardinality.ONE
        else:
            raise MalformedDocumentError(
                f"_embedded.{name} must be an object, an array or null.",
                format=NAME,
                resource_type=resource_type,
                resource_id=resource_id,
                relation=name,
            )
        target_type = targets[0].type if targets else None
        return RelationshipRef(
            name, target_type, tuple(target.id for target in targets), cardinality, targets
        )

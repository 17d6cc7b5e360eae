"""Representation pipeline: data access, link resolution, then encoding."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping

from hateoas_kit.core.links import LinkContext, resolve_collection_links, resolve_links
from hateoas_kit.core.resource import Cardinality, Resource
from hateoas_kit.datalayer import DataAccess
from hateoas_kit.exceptions import (
    HypermediaError,
    ResourceNotFoundError,
    UnresolvableRelationError,
)
from hateoas_kit.formats import WireFormat, encode, encode_collection, error_document, get_format
from hateoas_kit.pagination import PageCursor, PaginationBase, StandardPagination
from hateoas_kit.utils.query_params import parse_query_params


logger = logging.getLogger(__name__)


class ResourceRepresenter:
    """Turn resources supplied by a data layer into wire documents."""

    pagination_class: type[PaginationBase] = StandardPagination

    def __init__(self, data_layer: DataAccess, context: LinkContext) -> None:
        self.data_layer = data_layer
        self.context = context

    def context_from_query(self, params: Mapping[str, Any]) -> LinkContext:
        """Return the base context with ``include`` and ``page[...]`` applied."""
        parsed = parse_query_params(params)
        context = self.context
        if parsed["include"]:
            context = context.with_embed(parsed["include"])
        page = parsed["page"]
        if page:
            try:
                cursor = PageCursor(
                    offset=int(page.get("offset", 0)),
                    limit=int(page.get("limit", context.page_size)),
                )
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Invalid page parameters {page!r}: {exc}") from exc
            context = context.with_cursor(cursor)
        return context

    def load(self, resource_type: str, resource_id: str) -> Resource:
        resource = self.data_layer.load_resource(resource_type, resource_id)
        if resource is None:
            raise ResourceNotFoundError(
                f"{resource_type}/{resource_id} does not exist.",
                resource_type=resource_type,
                resource_id=str(resource_id),
            )
        return resource

    def load_embedded(self, resource: Resource, context: LinkContext) -> Resource:
        """Attach full target resources for every relation ``context`` embeds."""
        embed = context.top_level_embed - context.top_level_link_only
        if not embed:
            return resource
        relationships = []
        for ref in resource.relationships:
            if ref.name not in embed:
                relationships.append(ref)
                continue
            child_context = context.nested(ref.name)
            targets = [
                self.load_embedded(target, child_context)
                for target in self.data_layer.load_related(resource.type, resource.id, ref.name)
            ]
            if ref.cardinality is Cardinality.ONE:
                targets = targets[:1]
            relationships.append(
                replace(ref, ids=tuple(target.id for target in targets), resources=tuple(targets))
            )
        return replace(resource, relationships=tuple(relationships))

    def represent(
        self,
        resource_type: str,
        resource_id: str,
        format: WireFormat | str,
        *,
        context: LinkContext | None = None,
        **options: Any,
    ) -> dict[str, Any]:
        """Return the wire document for one resource."""
        context = context or self.context
        wire_format = get_format(format)
        resource = self.load(resource_type, resource_id)
        resource = self.load_embedded(resource, context)
        link_set = resolve_links(resource, context)
        logger.debug("Encoding %s/%s as %s", resource.type, resource.id, wire_format.name)
        return encode(resource, link_set, wire_format, **options)

    def represent_related(
        self,
        resource_type: str,
        resource_id: str,
        relation: str,
        format: WireFormat | str,
        *,
        context: LinkContext | None = None,
        **options: Any,
    ) -> dict[str, Any]:
        """Return the document for the targets of ``relation``.

        To-many relations are paginated with the context's cursor; to-one
        relations return the target's own document.
        """
        context = context or self.context
        wire_format = get_format(format)
        resource = self.load(resource_type, resource_id)
        ref = resource.relationship(relation)
        if ref is None:
            raise UnresolvableRelationError(
                f"{resource.type}/{resource.id} declares no relation '{relation}'.",
                resource_type=resource.type,
                resource_id=resource.id,
                relation=relation,
            )
        related = list(self.data_layer.load_related(resource.type, resource.id, relation))
        item_context = replace(context, embed=frozenset(), cursor=None)

        if ref.cardinality is Cardinality.ONE:
            if not related:
                raise ResourceNotFoundError(
                    f"{resource.type}/{resource.id} has no '{relation}'.",
                    resource_type=resource.type,
                    resource_id=resource.id,
                    relation=relation,
                )
            target = related[0]
            return encode(target, resolve_links(target, item_context), wire_format, **options)

        paginator = self.pagination_class()
        cursor = context.page_cursor
        page_items = paginator.paginate(related, cursor)
        collection_links = resolve_collection_links(
            context.related_url(resource.type, resource.id, relation),
            context,
            total=len(related),
            pagination=paginator,
        )
        return encode_collection(
            page_items,
            [resolve_links(item, item_context) for item in page_items],
            collection_links,
            wire_format,
            name=relation,
            meta=paginator.get_meta(total=len(related), cursor=cursor),
            **options,
        )

    def render_error(self, exc: HypermediaError, format: WireFormat | str) -> dict[str, Any]:
        """Return ``exc`` as an error document in ``format``."""
        return error_document(exc, format)

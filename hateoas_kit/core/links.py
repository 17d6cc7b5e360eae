"""Link resolution: compute self, related, action and pagination links."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Mapping
from urllib.parse import quote, unquote, urlsplit

from hateoas_kit.config import DEFAULT_PAGINATION_NAMES, HypermediaSettings
from hateoas_kit.core.resource import Link, RelationshipRef, Resource
from hateoas_kit.exceptions import InvalidResourceError, UnresolvableRelationError
from hateoas_kit.pagination import PageCursor, PaginationBase, StandardPagination


SELF = "self"


class LinkMode(str, Enum):
    LINK = "link"
    EMBED = "embed"


@dataclass(frozen=True)
class ActionLink:
    """Template for an action link appended to a resource's self URL."""

    rel: str
    path: str
    method: str = "POST"
    title: str | None = None


@dataclass(frozen=True)
class LinkContext:
    """Per-request inputs for link resolution."""

    base_url: str = ""
    embed: frozenset[str] = frozenset()
    link_only: frozenset[str] = frozenset()
    cursor: PageCursor | None = None
    page_size: int = 10
    actions: Mapping[str, tuple[ActionLink, ...]] = field(default_factory=dict)
    pagination_names: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_PAGINATION_NAMES)
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        object.__setattr__(self, "embed", frozenset(self.embed))
        object.__setattr__(self, "link_only", frozenset(self.link_only))
        if self.page_size < 1:
            raise ValueError("page_size must be a positive integer.")

    @classmethod
    def from_settings(
        cls,
        settings: HypermediaSettings,
        *,
        cursor: PageCursor | None = None,
        actions: Mapping[str, Iterable[ActionLink]] | None = None,
    ) -> "LinkContext":
        """Build a context from loaded settings."""
        return cls(
            base_url=settings.base_url,
            embed=frozenset(settings.embed),
            link_only=frozenset(settings.link_only),
            cursor=cursor,
            page_size=settings.page_size,
            actions={key: tuple(value) for key, value in (actions or {}).items()},
            pagination_names=dict(settings.pagination_names),
        )

    def with_embed(self, embed: Iterable[str]) -> "LinkContext":
        return replace(self, embed=frozenset(embed))

    def with_cursor(self, cursor: PageCursor | None) -> "LinkContext":
        return replace(self, cursor=cursor)

    @property
    def top_level_embed(self) -> set[str]:
        return {path.split(".", 1)[0] for path in self.embed if path}

    @property
    def top_level_link_only(self) -> set[str]:
        return {path for path in self.link_only if "." not in path}

    def nested(self, relation: str) -> "LinkContext":
        """Return the context that applies to targets embedded under ``relation``."""
        prefix = f"{relation}."
        return replace(
            self,
            embed=frozenset(path[len(prefix) :] for path in self.embed if path.startswith(prefix)),
            link_only=frozenset(
                path[len(prefix) :] for path in self.link_only if path.startswith(prefix)
            ),
            cursor=None,
        )

    @property
    def page_cursor(self) -> PageCursor:
        return self.cursor or PageCursor(offset=0, limit=self.page_size)

    def collection_url(self, resource_type: str) -> str:
        return f"{self.base_url}/{_segment(resource_type)}"

    def resource_url(self, resource_type: str, resource_id: str) -> str:
        return f"{self.collection_url(resource_type)}/{_segment(resource_id)}"

    def related_url(self, resource_type: str, resource_id: str, relation: str) -> str:
        return f"{self.resource_url(resource_type, resource_id)}/{_segment(relation)}"


@dataclass(frozen=True)
class EmbeddedTarget:
    resource: Resource
    links: "LinkSet"


@dataclass(frozen=True)
class RelationLinkage:
    """Resolved link state of one relationship."""

    name: str
    link: Link
    mode: LinkMode
    relationship: RelationshipRef
    embedded: tuple[EmbeddedTarget, ...] = ()

    @property
    def is_embedded(self) -> bool:
        return self.mode is LinkMode.EMBED


@dataclass(frozen=True)
class LinkSet:
    """Immutable, ordered set of links for one resource or collection."""

    self_link: Link
    actions: tuple[tuple[str, Link], ...] = ()
    relations: tuple[RelationLinkage, ...] = ()
    pagination: tuple[tuple[str, Link], ...] = ()

    def relation(self, name: str) -> RelationLinkage | None:
        for linkage in self.relations:
            if linkage.name == name:
                return linkage
        return None

    def links(self) -> dict[str, Link]:
        """Return every link keyed by relation name, self first."""
        links = {SELF: self.self_link}
        links.update(self.actions)
        links.update((linkage.name, linkage.link) for linkage in self.relations)
        links.update(self.pagination)
        return links

    def get(self, name: str) -> Link | None:
        return self.links().get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.links()

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-ready view; identical inputs give identical output."""
        result: dict[str, Any] = {
            "links": {name: link.as_dict() for name, link in self.links().items()}
        }
        embedded = {
            linkage.name: [
                {"type": target.resource.type, "id": target.resource.id, **target.links.as_dict()}
                for target in linkage.embedded
            ]
            for linkage in self.relations
            if linkage.is_embedded
        }
        if embedded:
            result["embedded"] = embedded
        return result

    def to_json(self) -> str:
        return json.dumps(self.as_dict(), separators=(",", ":"))


def resolve_links(resource: Resource, context: LinkContext) -> LinkSet:
    """Compute the LinkSet of ``resource`` under ``context``.

    Raises UnresolvableRelationError if a relation named in ``context.embed``
    is not declared on the resource.
    """
    for name in sorted(context.top_level_embed):
        if resource.relationship(name) is None:
            raise UnresolvableRelationError(
                f"Cannot embed undeclared relation '{name}'.",
                resource_type=resource.type,
                resource_id=resource.id,
                relation=name,
            )
    return _resolve(resource, context)


def _resolve(resource: Resource, context: LinkContext) -> LinkSet:
    self_href = context.resource_url(resource.type, resource.id)
    actions = tuple(
        (action.rel, Link(f"{self_href}/{action.path.lstrip('/')}", method=action.method, title=action.title))
        for action in context.actions.get(resource.type, ())
    )
    taken = {SELF, *resource.relationship_names}
    for rel, _ in actions:
        if rel in taken:
            raise InvalidResourceError(
                f"Action link '{rel}' collides with a relationship or self link.",
                resource_type=resource.type,
                resource_id=resource.id,
                relation=rel,
            )
    embed = context.top_level_embed
    link_only = context.top_level_link_only
    relations = []
    for ref in resource.relationships:
        link = Link(context.related_url(resource.type, resource.id, ref.name))
        if ref.name in embed and ref.name not in link_only and ref.is_loaded:
            child_context = context.nested(ref.name)
            embedded = tuple(
                EmbeddedTarget(target, _resolve(target, child_context))
                for target in ref.resources or ()
            )
            relations.append(RelationLinkage(ref.name, link, LinkMode.EMBED, ref, embedded))
        else:
            relations.append(RelationLinkage(ref.name, link, LinkMode.LINK, ref))
    return LinkSet(self_link=Link(self_href), actions=actions, relations=tuple(relations))


def resolve_collection_links(
    url: str,
    context: LinkContext,
    *,
    total: int | None = None,
    has_more: bool = False,
    pagination: PaginationBase | None = None,
) -> LinkSet:
    """Compute self and pagination links for a collection served at ``url``."""
    paginator = pagination or StandardPagination()
    links = paginator.get_links(
        url=url,
        total=total,
        cursor=context.page_cursor,
        names=context.pagination_names,
        has_more=has_more,
    )
    self_href = links.pop(SELF)
    return LinkSet(
        self_link=Link(self_href),
        pagination=tuple((name, Link(href)) for name, href in links.items()),
    )


def identity_from_href(href: str) -> tuple[str, str] | None:
    """Return ``(type, id)`` from the last two path segments of a self href."""
    path = urlsplit(href).path.rstrip("/")
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) < 2:
        return None
    return unquote(segments[-2]), unquote(segments[-1])


def _segment(value: str) -> str:
    return quote(str(value), safe="")

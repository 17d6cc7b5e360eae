"""Format-independent resource model."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

from hateoas_kit.exceptions import InvalidResourceError


class Cardinality(str, Enum):
    ONE = "one"
    MANY = "many"


@dataclass(frozen=True)
class Link:
    """A single hypermedia link with optional metadata."""

    href: str
    method: str | None = None
    type: str | None = None
    title: str | None = None
    templated: bool = False

    def as_dict(self) -> dict[str, Any]:
        """Return the link object with only the metadata that is set."""
        link: dict[str, Any] = {"href": self.href}
        if self.method is not None:
            link["method"] = self.method
        if self.type is not None:
            link["type"] = self.type
        if self.title is not None:
            link["title"] = self.title
        if self.templated:
            link["templated"] = True
        return link


@dataclass(frozen=True)
class RelationshipRef:
    """Typed reference from a resource to one or many other resources.

    ``ids`` is ``None`` while the targets are not yet loaded. ``resources``
    holds the target resources when their full data is available, which is
    what makes a relation eligible for embedding. ``cardinality`` and
    ``target_type`` are ``None`` only for relations decoded from a format
    that does not convey them.
    """

    name: str
    target_type: str | None
    ids: tuple[str, ...] | None = None
    cardinality: Cardinality | None = Cardinality.ONE
    resources: tuple["Resource", ...] | None = None

    @property
    def is_loaded(self) -> bool:
        return self.resources is not None

    @property
    def target_ids(self) -> tuple[str, ...] | None:
        """Return known target ids, derived from loaded resources if needed."""
        if self.ids is not None:
            return self.ids
        if self.resources is not None:
            return tuple(resource.id for resource in self.resources)
        return None

    def identifiers(self) -> list[tuple[str, str]]:
        """Return ``(type, id)`` pairs for every known target."""
        if self.resources is not None:
            return [resource.key for resource in self.resources]
        if self.ids is None or self.target_type is None:
            return []
        return [(self.target_type, target_id) for target_id in self.ids]


@dataclass(frozen=True)
class Resource:
    """One domain entity plus its typed relationships.

    ``links`` is populated by decoders with the links the resource was served
    with; it is not part of equality.
    """

    type: str
    id: str
    attributes: Mapping[str, Any] = field(default_factory=dict)
    relationships: tuple[RelationshipRef, ...] = ()
    links: Mapping[str, Link] = field(default_factory=dict, compare=False)

    @property
    def key(self) -> tuple[str, str]:
        return (self.type, self.id)

    def relationship(self, name: str) -> RelationshipRef | None:
        """Return the relationship declared under ``name``, if any."""
        for relationship in self.relationships:
            if relationship.name == name:
                return relationship
        return None

    @property
    def relationship_names(self) -> list[str]:
        return [relationship.name for relationship in self.relationships]


def make_resource(
    type: str,
    id: Any,
    attributes: Mapping[str, Any] | None = None,
    relationships: Iterable[RelationshipRef] = (),
    *,
    links: Mapping[str, Link] | None = None,
) -> Resource:
    """Validate input and construct a Resource.

    Raises InvalidResourceError for an empty type or id, duplicate relationship
    names, or a to-one relationship naming more than one target.
    """
    resource_id = "" if id is None else str(id)
    if not type:
        raise InvalidResourceError(
            "Resource type must not be empty.", resource_id=resource_id or None
        )
    if not resource_id:
        raise InvalidResourceError("Resource id must not be empty.", resource_type=type)

    refs = tuple(relationships)
    seen: set[str] = set()
    for ref in refs:
        if not ref.name:
            raise InvalidResourceError(
                "Relationship name must not be empty.",
                resource_type=type,
                resource_id=resource_id,
            )
        if ref.name == "self":
            raise InvalidResourceError(
                "Relationship name 'self' is reserved.",
                resource_type=type,
                resource_id=resource_id,
                relation=ref.name,
            )
        if ref.name in seen:
            raise InvalidResourceError(
                f"Duplicate relationship '{ref.name}'.",
                resource_type=type,
                resource_id=resource_id,
                relation=ref.name,
            )
        seen.add(ref.name)
        target_ids = ref.target_ids
        if ref.cardinality is Cardinality.ONE and target_ids is not None and len(target_ids) > 1:
            raise InvalidResourceError(
                f"To-one relationship '{ref.name}' names {len(target_ids)} targets.",
                resource_type=type,
                resource_id=resource_id,
                relation=ref.name,
            )

    return Resource(
        type=type,
        id=resource_id,
        attributes=dict(attributes or {}),
        relationships=refs,
        links=dict(links or {}),
    )


def to_one(
    name: str,
    target_type: str,
    target: "str | Resource | None" = None,
    *,
    loaded: bool = True,
) -> RelationshipRef:
    """Build a to-one relationship from an id, a Resource, or nothing.

    With ``loaded=False`` the relationship is left in the not-yet-loaded state.
    """
    if not loaded:
        return RelationshipRef(name, target_type, None, Cardinality.ONE)
    if target is None:
        return RelationshipRef(name, target_type, (), Cardinality.ONE)
    if isinstance(target, Resource):
        return RelationshipRef(name, target_type, (target.id,), Cardinality.ONE, (target,))
    return RelationshipRef(name, target_type, (str(target),), Cardinality.ONE)


def to_many(
    name: str,
    target_type: str,
    targets: "Iterable[str | Resource] | None" = (),
    *,
    loaded: bool = False,
) -> RelationshipRef:
    """Build a to-many relationship; ``targets=None`` means not yet loaded.

    Targets given as Resources mark the relationship as loaded. Pass
    ``loaded=True`` to mark an empty target list as loaded data.
    """
    if targets is None:
        return RelationshipRef(name, target_type, None, Cardinality.MANY)
    items = list(targets)
    if (items or loaded) and all(isinstance(item, Resource) for item in items):
        resources = tuple(items)
        return RelationshipRef(
            name,
            target_type,
            tuple(resource.id for resource in resources),
            Cardinality.MANY,
            resources,
        )
    return RelationshipRef(
        name, target_type, tuple(str(getattr(item, "id", item)) for item in items), Cardinality.MANY
    )

"""Data-access collaborator interface and an in-memory implementation."""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence

from hateoas_kit.core.resource import Resource
from hateoas_kit.exceptions import ResourceNotFoundError, UnresolvableRelationError


class DataAccess(Protocol):
    """Supplies resources to the representation pipeline."""

    def load_resource(self, resource_type: str, resource_id: str) -> Resource | None: ...

    def load_related(
        self, resource_type: str, resource_id: str, relation: str
    ) -> Sequence[Resource]: ...


class InMemoryDataLayer:
    """DataAccess over a dict of resources keyed by ``(type, id)``."""

    def __init__(self, resources: Iterable[Resource] = ()) -> None:
        self._resources: dict[tuple[str, str], Resource] = {}
        for resource in resources:
            self.add(resource)

    def add(self, resource: Resource) -> None:
        self._resources[resource.key] = resource

    def load_resource(self, resource_type: str, resource_id: str) -> Resource | None:
        return self._resources.get((resource_type, str(resource_id)))

    def load_related(self, resource_type: str, resource_id: str, relation: str) -> list[Resource]:
        """Return stored targets of ``relation``; unknown targets are skipped."""
        resource = self.load_resource(resource_type, resource_id)
        if resource is None:
            raise ResourceNotFoundError(
                f"{resource_type}/{resource_id} does not exist.",
                resource_type=resource_type,
                resource_id=str(resource_id),
            )
        ref = resource.relationship(relation)
        if ref is None:
            raise UnresolvableRelationError(
                f"{resource_type}/{resource_id} declares no relation '{relation}'.",
                resource_type=resource_type,
                resource_id=str(resource_id),
                relation=relation,
            )
        return [self._resources[key] for key in ref.identifiers() if key in self._resources]

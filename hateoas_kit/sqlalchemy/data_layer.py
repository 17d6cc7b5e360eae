"""SQLAlchemy data layer: expose mapped ORM instances as Resources."""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy.inspection import inspect
from sqlalchemy.orm import MANYTOONE, Session
from sqlalchemy.orm.attributes import NO_VALUE

from hateoas_kit.core.resource import Cardinality, RelationshipRef, Resource, make_resource
from hateoas_kit.exceptions import ResourceNotFoundError, UnresolvableRelationError


class SQLAlchemyDataLayer:
    """Bridge representers with SQLAlchemy models.

    ``models`` maps resource type names to mapped classes. Relationships that
    have not been loaded on an instance are reported as not yet loaded
    instead of triggering a lazy load.
    """

    def __init__(self, *, session: Session, models: Mapping[str, Any]) -> None:
        """Store the session and the type registry."""
        self.session = session
        self.models = dict(models)
        self._types = {model: type_name for type_name, model in self.models.items()}

    def load_resource(self, resource_type: str, resource_id: str) -> Resource | None:
        """Return a single resource, or None if no row matches."""
        instance = self._get(resource_type, resource_id)
        return None if instance is None else self.to_resource(instance)

    def load_related(self, resource_type: str, resource_id: str, relation: str) -> list[Resource]:
        """Return the related resources, loading the relationship if needed."""
        instance = self._get(resource_type, resource_id)
        if instance is None:
            raise ResourceNotFoundError(
                f"{resource_type}/{resource_id} does not exist.",
                resource_type=resource_type,
                resource_id=str(resource_id),
            )
        mapper = inspect(instance.__class__)
        if relation not in mapper.relationships:
            raise UnresolvableRelationError(
                f"{resource_type}/{resource_id} declares no relation '{relation}'.",
                resource_type=resource_type,
                resource_id=str(resource_id),
                relation=relation,
            )
        related = getattr(instance, relation)
        if related is None:
            return []
        items = list(related) if mapper.relationships[relation].uselist else [related]
        return [self.to_resource(item) for item in items]

    def to_resource(self, instance: Any) -> Resource:
        """Serialize a model instance into a Resource."""
        return make_resource(
            self.type_of(instance.__class__),
            self.get_id(instance),
            self.get_attributes(instance),
            self.get_relationships(instance),
        )

    def type_of(self, model: Any) -> str:
        type_name = self._types.get(model)
        if type_name is None:
            type_name = getattr(model, "__tablename__", model.__name__.lower())
        return type_name

    def get_id(self, instance: Any) -> str:
        """Return the resource id as a string."""
        identity = inspect(instance).identity
        if identity:
            return "-".join(str(part) for part in identity)
        value = getattr(instance, "id", None)
        return "" if value is None else str(value)

    def get_attributes(self, instance: Any) -> dict[str, Any]:
        """Return column values, leaving out primary and relationship keys."""
        mapper = inspect(instance.__class__)
        hidden = {column.key for column in mapper.primary_key}
        for relationship in mapper.relationships:
            if relationship.direction is MANYTOONE:
                hidden.update(column.key for column in relationship.local_columns)
        state = inspect(instance)
        attributes: dict[str, Any] = {}
        for attr in mapper.column_attrs:
            if attr.key in hidden or any(column.key in hidden for column in attr.columns):
                continue
            value = state.attrs[attr.key].loaded_value
            attributes[attr.key] = None if value is NO_VALUE else value
        return attributes

    def get_relationships(self, instance: Any) -> list[RelationshipRef]:
        """Return relationship refs; unloaded relationships carry no ids."""
        mapper = inspect(instance.__class__)
        state = inspect(instance)
        refs = []
        for relationship in mapper.relationships:
            target_type = self.type_of(relationship.mapper.class_)
            cardinality = Cardinality.MANY if relationship.uselist else Cardinality.ONE
            loaded = state.attrs[relationship.key].loaded_value
            if loaded is NO_VALUE:
                refs.append(RelationshipRef(relationship.key, target_type, None, cardinality))
                continue
            if relationship.uselist:
                ids = tuple(self.get_id(item) for item in loaded or ())
            else:
                ids = () if loaded is None else (self.get_id(loaded),)
            refs.append(RelationshipRef(relationship.key, target_type, ids, cardinality))
        return refs

    def _get(self, resource_type: str, resource_id: str) -> Any:
        model = self.models.get(resource_type)
        if model is None:
            raise ResourceNotFoundError(
                f"No model registered for type '{resource_type}'.",
                resource_type=resource_type,
                resource_id=str(resource_id),
            )
        return self.session.get(model, self._coerce_id(model, resource_id))

    def _coerce_id(self, model: Any, resource_id: str) -> Any:
        column = inspect(model).primary_key[0]
        try:
            return column.type.python_type(resource_id)
        except (NotImplementedError, TypeError, ValueError):
            return resource_id

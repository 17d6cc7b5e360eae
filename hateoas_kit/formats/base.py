"""Format strategy object and decoded document containers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

from pydantic import ValidationError

from hateoas_kit.core.resource import Link, Resource
from hateoas_kit.exceptions import MalformedDocumentError


@dataclass(frozen=True)
class DecodedDocument:
    """A decoded single-resource document.

    ``included`` lists every embedded or included resource, at any depth,
    once per ``(type, id)``.
    """

    resource: Resource
    included: tuple[Resource, ...] = ()

    @property
    def resources(self) -> tuple[Resource, ...]:
        return (self.resource, *self.included)


@dataclass(frozen=True)
class DecodedCollection:
    """A decoded collection page with its self and pagination links."""

    resources: tuple[Resource, ...]
    included: tuple[Resource, ...] = ()
    links: Mapping[str, Link] = field(default_factory=dict)
    meta: Mapping[str, Any] = field(default_factory=dict)

    def link(self, name: str) -> Link | None:
        return self.links.get(name)


@dataclass(frozen=True)
class WireFormat:
    """Tagged strategy for one wire format.

    Each variant supplies its own encode/decode functions; callers select a
    variant by value rather than by subclassing.
    """

    name: str
    media_type: str
    encode: Callable[..., dict[str, Any]]
    encode_collection: Callable[..., dict[str, Any]]
    decode: Callable[..., DecodedDocument]
    decode_collection: Callable[..., DecodedCollection]
    error_document: Callable[..., dict[str, Any]]
    recognizes: Callable[[Mapping[str, Any]], bool]

    def __repr__(self) -> str:
        return f"WireFormat({self.name!r})"


def load_document(document: Any, *, format_name: str) -> Mapping[str, Any]:
    """Return ``document`` as a mapping, parsing bytes or text as JSON."""
    if isinstance(document, (bytes, bytearray, str)):
        try:
            document = json.loads(document)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedDocumentError(
                f"Document is not valid JSON: {exc}", format=format_name
            ) from exc
    if not isinstance(document, Mapping):
        raise MalformedDocumentError(
            "Document must be a JSON object.", format=format_name
        )
    return document


def validation_error(
    exc: ValidationError, *, format_name: str, what: str
) -> MalformedDocumentError:
    """Translate a pydantic ValidationError into a MalformedDocumentError."""
    locations = ", ".join(
        ".".join(str(part) for part in error["loc"]) or "<root>" for error in exc.errors()
    )
    return MalformedDocumentError(
        f"Invalid {what}: {exc.error_count()} error(s) at {locations}.",
        format=format_name,
    )


class ResourceIndex:
    """Insertion-ordered, ``(type, id)``-deduplicated collection of resources."""

    def __init__(self, exclude: Iterable[tuple[str, str]] = ()) -> None:
        self._excluded = set(exclude)
        self._items: dict[tuple[str, str], Any] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._excluded or key in self._items

    def reserve(self, key: tuple[str, str]) -> bool:
        """Claim ``key``; return False if it is excluded or already present."""
        if key in self:
            return False
        self._items[key] = None
        return True

    def set(self, key: tuple[str, str], value: Any) -> None:
        self._items[key] = value

    def setdefault(self, key: tuple[str, str], value: Any) -> Any:
        if key in self._excluded:
            return value
        return self._items.setdefault(key, value)

    def values(self) -> list[Any]:
        return [value for value in self._items.values() if value is not None]

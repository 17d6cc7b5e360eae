"""Wire formats: HAL and JSON:API strategies plus format-independent entry points."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from pydantic_core import to_json

from hateoas_kit.core.links import LinkSet
from hateoas_kit.core.resource import Resource
from hateoas_kit.exceptions import HypermediaError, MalformedDocumentError, UnsupportedFormatError
from hateoas_kit.utils.content_negotiation import parse_accept, parse_media_type

from . import hal, jsonapi
from .base import DecodedCollection, DecodedDocument, WireFormat, load_document


HAL = WireFormat(
    name=hal.NAME,
    media_type=hal.MEDIA_TYPE,
    encode=hal.encode,
    encode_collection=hal.encode_collection,
    decode=hal.decode,
    decode_collection=hal.decode_collection,
    error_document=hal.error_document,
    recognizes=hal.recognizes,
)

JSONAPI = WireFormat(
    name=jsonapi.NAME,
    media_type=jsonapi.MEDIA_TYPE,
    encode=jsonapi.encode,
    encode_collection=jsonapi.encode_collection,
    decode=jsonapi.decode,
    decode_collection=jsonapi.decode_collection,
    error_document=jsonapi.error_document,
    recognizes=jsonapi.recognizes,
)

FORMATS: tuple[WireFormat, ...] = (HAL, JSONAPI)
ALIASES: dict[str, WireFormat] = {"hal": HAL, "jsonapi": JSONAPI, "json:api": JSONAPI}


def get_format(format: WireFormat | str) -> WireFormat:
    """Resolve a WireFormat from itself, its name, or its media type."""
    if isinstance(format, WireFormat):
        if format in FORMATS:
            return format
        raise UnsupportedFormatError(f"Unregistered format {format.name!r}.", format=format.name)
    if isinstance(format, str):
        wanted = format.strip().lower()
        media_type = parse_media_type(wanted)["media_type"]
        if wanted in ALIASES:
            return ALIASES[wanted]
        for candidate in FORMATS:
            if media_type == candidate.media_type:
                return candidate
    raise UnsupportedFormatError(f"Unsupported format {format!r}.", format=str(format))


def negotiate_format(accept: str | None, *, default: WireFormat = JSONAPI) -> WireFormat:
    """Pick the preferred supported format for an Accept header."""
    if not accept:
        return default
    for media_range in parse_accept(accept):
        media_type = media_range["media_type"]
        if media_type in ("*/*", "application/*", "application/json"):
            return default
        for candidate in FORMATS:
            if media_type == candidate.media_type:
                return candidate
    raise UnsupportedFormatError(f"None of {accept!r} is a supported format.", format=accept)


def detect_format(document: Any) -> WireFormat:
    """Guess the format of a wire document from its top-level members."""
    raw = load_document(document, format_name="unknown")
    for candidate in FORMATS:
        if candidate.recognizes(raw):
            return candidate
    raise MalformedDocumentError(
        "Document is neither HAL nor JSON:API: no '_links' or 'data' member."
    )


def encode(
    resource: Resource, link_set: LinkSet, format: WireFormat | str, **options: Any
) -> dict[str, Any]:
    """Encode ``resource`` with ``link_set`` in the given format."""
    return get_format(format).encode(resource, link_set, **options)


def encode_collection(
    resources: Sequence[Resource],
    link_sets: Sequence[LinkSet],
    collection_links: LinkSet,
    format: WireFormat | str,
    **options: Any,
) -> dict[str, Any]:
    """Encode one page of resources in the given format."""
    if len(resources) != len(link_sets):
        raise ValueError("Every resource needs exactly one link set.")
    return get_format(format).encode_collection(resources, link_sets, collection_links, **options)


def decode(document: Any, format: WireFormat | str, **options: Any) -> DecodedDocument:
    """Decode a single-resource document in the given format."""
    return get_format(format).decode(document, **options)


def decode_collection(document: Any, format: WireFormat | str, **options: Any) -> DecodedCollection:
    """Decode a collection page in the given format."""
    return get_format(format).decode_collection(document, **options)


def error_document(exc: HypermediaError, format: WireFormat | str) -> dict[str, Any]:
    """Render ``exc`` as an error document of the given format."""
    return get_format(format).error_document(exc)


def dumps(document: Mapping[str, Any] | Iterable[Any]) -> bytes:
    """Serialize a wire document to JSON bytes."""
    return to_json(document)


__all__ = [
    "FORMATS",
    "HAL",
    "JSONAPI",
    "DecodedCollection",
    "DecodedDocument",
    "WireFormat",
    "decode",
    "decode_collection",
    "detect_format",
    "dumps",
    "encode",
    "encode_collection",
    "error_document",
    "get_format",
    "negotiate_format",
]

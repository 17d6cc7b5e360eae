"""Helpers for hypermedia content negotiation."""

from __future__ import annotations

from typing import Any


def parse_media_type(content_type: str) -> dict[str, Any]:
    """Parse a media type and its parameters.

    ``ext`` and ``profile`` become lists of URIs, ``q`` a float (0.0 when
    unparseable), and any other parameter lands in ``other_params``.
    """
    media_type, _, rest = content_type.partition(";")
    params: dict[str, Any] = {"media_type": media_type.strip().lower(), "ext": [], "profile": [], "q": 1.0}

    for param in rest.split(";"):
        name, sep, raw_value = param.partition("=")
        if not sep:
            continue
        name = name.strip().lower()
        raw_value = raw_value.strip().strip('"')
        if name in ("ext", "profile"):
            params[name] = raw_value.split()
        elif name == "q":
            try:
                params["q"] = float(raw_value)
            except ValueError:
                params["q"] = 0.0
        else:
            params.setdefault("other_params", {})[name] = raw_value
    return params


def parse_accept(accept: str) -> list[dict[str, Any]]:
    """Parse an Accept header into media ranges ordered by preference."""
    ranges = [parse_media_type(item) for item in accept.split(",") if item.strip()]
    ranges = [item for item in ranges if item["q"] > 0]
    # sorted() is stable, so equal q keeps header order
    return sorted(ranges, key=lambda item: item["q"], reverse=True)

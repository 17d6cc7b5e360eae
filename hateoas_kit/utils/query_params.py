"""Helpers for include and page query parameter parsing."""

from __future__ import annotations

from typing import Any, Mapping


def _split_csv(value: str) -> list[str]:
    return [item for item in (part.strip() for part in value.split(",")) if item]


def parse_query_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize the ``include`` and ``page[...]`` query parameter families.

    Other parameters are ignored.
    """
    normalized: dict[str, Any] = {"include": [], "page": {}}

    for key, value in params.items():
        if value is None:
            continue
        raw_value = str(value)
        if key == "include":
            normalized["include"] = _split_csv(raw_value)
        elif key.startswith("page[") and key.endswith("]"):
            page_key = key[len("page[") : -1]
            try:
                normalized["page"][page_key] = int(raw_value)
            except ValueError:
                normalized["page"][page_key] = raw_value
    return normalized

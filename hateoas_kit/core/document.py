"""Top-level document construction for both wire formats."""

from typing import Any, Iterable, Mapping


class JSONAPIDocumentBuilder:
    """Build JSON:API v1.1 top-level documents from resource objects."""

    def build_single(
        self,
        resource: Mapping[str, Any] | None,
        *,
        included: Iterable[Mapping[str, Any]] | None = None,
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return a JSON:API document for a single resource object."""
        document: dict[str, Any] = {"data": None if resource is None else dict(resource)}
        return self._finish(document, included=included, links=links, meta=meta)

    def build_collection(
        self,
        resources: Iterable[Mapping[str, Any]],
        *,
        included: Iterable[Mapping[str, Any]] | None = None,
        links: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return a JSON:API document for a collection of resources."""
        document: dict[str, Any] = {"data": [dict(item) for item in resources]}
        return self._finish(document, included=included, links=links, meta=meta)

    def _finish(
        self,
        document: dict[str, Any],
        *,
        included: Iterable[Mapping[str, Any]] | None,
        links: Mapping[str, Any] | None,
        meta: Mapping[str, Any] | None,
    ) -> dict[str, Any]:
        included = list(included or ())
        if included:
            document["included"] = [dict(item) for item in included]
        if links:
            document["links"] = dict(links)
        if meta:
            document["meta"] = dict(meta)
        return document

    def build_error(self, errors: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
        """Return a JSON:API error document from error objects."""
        return {"errors": [dict(error) for error in errors]}


class HALDocumentBuilder:
    """Build HAL documents: state, then ``_links``, then ``_embedded``."""

    def build_single(
        self,
        state: Mapping[str, Any],
        *,
        links: Mapping[str, Any],
        embedded: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return a HAL resource object."""
        document: dict[str, Any] = dict(state)
        document["_links"] = dict(links)
        if embedded:
            document["_embedded"] = dict(embedded)
        return document

    def build_collection(
        self,
        name: str,
        items: Iterable[Mapping[str, Any]],
        *,
        links: Mapping[str, Any],
        meta: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return a HAL collection with items embedded under ``name``."""
        document: dict[str, Any] = dict(meta or {})
        document["_links"] = dict(links)
        document["_embedded"] = {name: [dict(item) for item in items]}
        return document

    def build_error(self, error: Mapping[str, Any]) -> dict[str, Any]:
        """Return a ``vnd.error`` document."""
        return dict(error)

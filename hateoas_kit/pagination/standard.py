"""Offset/limit pagination using page[offset] and page[limit] parameters."""

from __future__ import annotations

from typing import Any, Mapping, Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from .base import PageCursor, PaginationBase


class StandardPagination(PaginationBase):
    """page[offset]/page[limit] pagination."""

    def paginate(self, items: Sequence[Any], cursor: PageCursor) -> list[Any]:
        """Paginate based on the cursor's offset and limit."""
        return list(items[cursor.offset : cursor.offset + cursor.limit])

    def build_url(self, url: str, offset: int, limit: int) -> str:
        """Return ``url`` with its page parameters replaced."""
        split = urlsplit(url)
        query = [
            (key, value)
            for key, value in parse_qsl(split.query, keep_blank_values=True)
            if key not in ("page[offset]", "page[limit]")
        ]
        query.extend([("page[offset]", offset), ("page[limit]", limit)])
        return urlunsplit((split.scheme, split.netloc, split.path, urlencode(query), split.fragment))

    def get_links(
        self,
        *,
        url: str,
        total: int | None,
        cursor: PageCursor,
        names: Mapping[str, str],
        has_more: bool = False,
    ) -> dict[str, str]:
        """Build pagination links; ``last`` only when the total is known."""
        offset, limit = cursor.offset, cursor.limit
        links = {
            "self": self.build_url(url, offset, limit),
            names["first"]: self.build_url(url, 0, limit),
        }
        if total is not None:
            last_offset = max(0, (max(total - 1, 0) // limit) * limit)
            links[names["last"]] = self.build_url(url, last_offset, limit)
            has_more = offset + limit <= last_offset
        if offset > 0:
            links[names["prev"]] = self.build_url(url, max(offset - limit, 0), limit)
        if has_more:
            links[names["next"]] = self.build_url(url, offset + limit, limit)
        return links

    def get_meta(self, *, total: int | None, cursor: PageCursor) -> dict[str, Any]:
        """Build pagination metadata with total, limit, and offset."""
        meta: dict[str, Any] = {"limit": cursor.limit, "offset": cursor.offset}
        if total is not None:
            meta["total"] = total
        return meta

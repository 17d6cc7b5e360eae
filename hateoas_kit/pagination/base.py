"""Pagination base class for collection links and meta."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence


@dataclass(frozen=True)
class PageCursor:
    """Offset/limit position within a paginated collection."""

    offset: int = 0
    limit: int = 10

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError("Page offset must not be negative.")
        if self.limit < 1:
            raise ValueError("Page limit must be a positive integer.")


class PaginationBase:
    """Define pagination API for collection documents."""

    def paginate(self, items: Sequence[Any], cursor: PageCursor) -> list[Any]:
        """Return a paginated slice of items."""
        raise NotImplementedError

    def get_links(
        self,
        *,
        url: str,
        total: int | None,
        cursor: PageCursor,
        names: Mapping[str, str],
        has_more: bool = False,
    ) -> dict[str, str]:
        """Return pagination links keyed by the configured link names."""
        raise NotImplementedError

    def get_meta(self, *, total: int | None, cursor: PageCursor) -> dict[str, Any]:
        """Return pagination metadata (total, limit, offset)."""
        raise NotImplementedError

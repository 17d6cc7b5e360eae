"""Pagination strategies for collection documents."""

from .base import PageCursor, PaginationBase
from .standard import StandardPagination

__all__ = ["PageCursor", "PaginationBase", "StandardPagination"]

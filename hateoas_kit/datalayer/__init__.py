"""Data-access collaborators that supply resources to representers."""

from .base import DataAccess, InMemoryDataLayer

__all__ = ["DataAccess", "InMemoryDataLayer"]

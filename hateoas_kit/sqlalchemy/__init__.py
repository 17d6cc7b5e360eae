"""SQLAlchemy data-access adapter."""

from .data_layer import SQLAlchemyDataLayer

__all__ = ["SQLAlchemyDataLayer"]

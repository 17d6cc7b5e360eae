"""Representers drive data access, link resolution, and encoding."""

from .base import ResourceRepresenter

__all__ = ["ResourceRepresenter"]

"""Utilities for content negotiation and query parameter parsing."""

from .content_negotiation import parse_accept, parse_media_type
from .query_params import parse_query_params

__all__ = ["parse_accept", "parse_media_type", "parse_query_params"]

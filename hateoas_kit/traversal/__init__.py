"""Client-side traversal of hypermedia documents."""

from .cache import ResourceCache
from .engine import TraversalSession
from .transport import RequestsTransport, Transport, TransportError

__all__ = [
    "RequestsTransport",
    "ResourceCache",
    "Transport",
    "TransportError",
    "TraversalSession",
]

"""Session-scoped resource cache with per-key in-flight request coalescing."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable, Iterable, TypeVar

from hateoas_kit.core.resource import Resource


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class _Pending:
    task: "asyncio.Future[Any]"
    waiters: int = 0
    abandoned: bool = False


class ResourceCache:
    """
    Mapping from ``(type, id)`` to the last decoded Resource.

    Reads take no lock; writes are exclusive and a batch of resources is
    stored all at once. ``load`` shares one pending fetch between concurrent
    callers asking for the same key.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], Resource] = {}
        self._lock = threading.Lock()
        self._pending: dict[Hashable, _Pending] = {}

    def get(self, resource_type: str, resource_id: str) -> Resource | None:
        return self._entries.get((resource_type, resource_id))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[tuple[str, str]]:
        return list(self._entries)

    def put(self, resource: Resource) -> None:
        self.put_all([resource])

    def put_all(self, resources: Iterable[Resource]) -> None:
        """Store every resource in one exclusive update."""
        batch = {resource.key: resource for resource in resources}
        with self._lock:
            self._entries.update(batch)

    def discard(self, resource_type: str, resource_id: str) -> None:
        with self._lock:
            self._entries.pop((resource_type, resource_id), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def in_flight(self, key: Hashable) -> bool:
        return key in self._pending

    async def load(self, key: Hashable, factory: Callable[[], Awaitable[T]]) -> T:
        """Await the pending fetch for ``key``, starting it if there is none.

        The shared fetch is cancelled only when every caller awaiting it has
        been cancelled.
        """
        pending = self._pending.get(key)
        if pending is None or pending.abandoned:
            pending = _Pending(asyncio.ensure_future(factory()))
            self._pending[key] = pending
            pending.task.add_done_callback(lambda task: self._finished(key, pending, task))
            logger.debug("Started fetch for %s", key)
        else:
            logger.debug("Joined in-flight fetch for %s", key)

        pending.waiters += 1
        try:
            return await asyncio.shield(pending.task)
        finally:
            pending.waiters -= 1
            if pending.waiters == 0 and not pending.task.done():
                logger.debug("Cancelling fetch for %s: no callers left", key)
                pending.abandoned = True
                pending.task.cancel()

    def _finished(self, key: Hashable, pending: _Pending, task: "asyncio.Future[Any]") -> None:
        if self._pending.get(key) is pending:
            del self._pending[key]
        if not task.cancelled():
            # retrieve the exception so abandoned failures are not reported as unhandled
            task.exception()

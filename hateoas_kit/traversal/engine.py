"""Client-side traversal: follow links, decode, and cache resources."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping, TypeVar

from hateoas_kit.config import DEFAULT_PAGINATION_NAMES
from hateoas_kit.core.links import SELF
from hateoas_kit.core.resource import Cardinality, Link, Resource
from hateoas_kit.exceptions import (
    FetchError,
    FetchTimeoutError,
    RelationNotFoundError,
    UnboundedTraversalError,
)
from hateoas_kit.formats import JSONAPI, DecodedCollection, WireFormat, get_format

from .cache import ResourceCache
from .transport import Transport, TransportError


logger = logging.getLogger(__name__)

T = TypeVar("T")


class TraversalSession:
    """
    Explore a hypermedia API one link at a time.

    All state (format, cache, deadlines) belongs to the session. Fetches for
    the same target are coalesced through the session cache, and no request
    is ever retried.
    """

    def __init__(
        self,
        transport: Transport,
        format: WireFormat | str = JSONAPI,
        *,
        cache: ResourceCache | None = None,
        timeout: float | None = None,
        cardinalities: Mapping[str, Cardinality] | None = None,
        pagination_names: Mapping[str, str] | None = None,
    ) -> None:
        self.transport = transport
        self.format = get_format(format)
        self.cache = cache if cache is not None else ResourceCache()
        self.timeout = timeout
        self.cardinalities = dict(cardinalities or {})
        self.pagination_names = {**DEFAULT_PAGINATION_NAMES, **(pagination_names or {})}

    async def fetch(self, url: str, *, timeout: float | None = None) -> Resource:
        """Fetch and decode the resource document at ``url``."""
        return await self._with_deadline(
            self.cache.load(("href", url), lambda: self._retrieve(url)),
            timeout,
            url=url,
        )

    async def fetch_collection(self, url: str, *, timeout: float | None = None) -> DecodedCollection:
        """Fetch and decode the collection page at ``url``."""
        return await self._with_deadline(
            self.cache.load(("collection", url), lambda: self._retrieve_collection(url)),
            timeout,
            url=url,
        )

    async def follow(
        self, resource: Resource, relation: str, *, timeout: float | None = None
    ) -> Resource | None:
        """Return the target of a to-one ``relation`` of ``resource``.

        Embedded or cached targets are returned without a network call, and a
        relation known to be empty returns None.

        Raises RelationNotFoundError when the relation is not linked from the
        resource, FetchError when the transport fails, and FetchTimeoutError
        when the deadline passes.
        """
        ref = resource.relationship(relation)
        if ref is not None and ref.cardinality is Cardinality.MANY:
            raise TypeError(
                f"Relation {relation!r} of {resource.type}/{resource.id} is to-many; "
                "use follow_many() or iter_pages()."
            )
        if ref is not None and ref.resources:
            target = ref.resources[0]
            return self.cache.get(*target.key) or target
        target_ids = ref.target_ids if ref is not None else None
        if target_ids == ():
            return None
        if ref is not None and ref.target_type and target_ids:
            cached = self.cache.get(ref.target_type, target_ids[0])
            if cached is not None:
                logger.debug("Cache hit for %s/%s", ref.target_type, target_ids[0])
                return cached

        link = self._link(resource, relation)
        if ref is not None and ref.target_type and target_ids:
            key: Any = (ref.target_type, target_ids[0])
        else:
            key = ("href", link.href)
        context = {"resource_type": resource.type, "resource_id": resource.id, "relation": relation}
        return await self._with_deadline(
            self.cache.load(key, lambda: self._retrieve(link.href, **context)),
            timeout,
            url=link.href,
            **context,
        )

    async def follow_many(
        self, resource: Resource, relation: str, *, timeout: float | None = None
    ) -> list[Resource]:
        """Return the targets of a to-many ``relation``.

        Embedded targets, or targets that are all cached, are returned
        directly; otherwise only the first page of the related collection is
        fetched. Use ``iter_pages`` to walk every page.
        """
        ref = resource.relationship(relation)
        if ref is not None and ref.resources is not None:
            return [self.cache.get(*target.key) or target for target in ref.resources]
        if ref is not None and ref.target_type and ref.ids is not None:
            cached = [self.cache.get(ref.target_type, target_id) for target_id in ref.ids]
            if all(item is not None for item in cached):
                return list(cached)
        link = self._link(resource, relation)
        page = await self.fetch_collection(link.href, timeout=timeout)
        return list(page.resources)

    async def iter_pages(
        self,
        resource: Resource,
        relation: str,
        *,
        until: Callable[[Resource], bool] | None = None,
        timeout: float | None = None,
    ) -> AsyncIterator[Resource]:
        """Yield the targets of ``relation`` page by page, following ``next``.

        Iteration ends after the page the server reports as ``last``, when a
        page has no ``next`` link, or before the first resource for which
        ``until`` returns true. When the server reports no ``last`` page the
        caller must supply ``until``; otherwise UnboundedTraversalError is
        raised instead of requesting a second page.
        """
        url = self._link(resource, relation).href
        while True:
            page = await self.fetch_collection(url, timeout=timeout)
            for item in page.resources:
                if until is not None and until(item):
                    return
                yield item

            next_link = page.link(self.pagination_names["next"])
            if next_link is None:
                return
            last_link = page.link(self.pagination_names["last"])
            if last_link is not None:
                current = page.link(SELF)
                if current is not None and current.href == last_link.href:
                    return
            elif until is None:
                raise UnboundedTraversalError(
                    f"{url} reports no last page; pass `until` to bound the traversal.",
                    resource_type=resource.type,
                    resource_id=resource.id,
                    relation=relation,
                )
            url = next_link.href

    def _link(self, resource: Resource, relation: str) -> Link:
        link = resource.links.get(relation)
        if link is None:
            raise RelationNotFoundError(
                f"{resource.type}/{resource.id} has no link for relation '{relation}'.",
                resource_type=resource.type,
                resource_id=resource.id,
                relation=relation,
                format=self.format.name,
            )
        return link

    async def _get(self, url: str, **context: Any) -> bytes:
        logger.debug("Fetching %s as %s", url, self.format.media_type)
        try:
            return await self.transport.get(url, accept=self.format.media_type)
        except TransportError as exc:
            raise FetchError(
                f"Could not fetch {url}: {exc}", url=url, format=self.format.name, **context
            ) from exc

    async def _retrieve(self, url: str, **context: Any) -> Resource:
        body = await self._get(url, **context)
        decoded = self.format.decode(body, cardinalities=self.cardinalities)
        self.cache.put_all(decoded.resources)
        return decoded.resource

    async def _retrieve_collection(self, url: str) -> DecodedCollection:
        body = await self._get(url)
        page = self.format.decode_collection(body, cardinalities=self.cardinalities)
        self.cache.put_all([*page.resources, *page.included])
        return page

    async def _with_deadline(
        self, awaitable: Awaitable[T], timeout: float | None, *, url: str, **context: Any
    ) -> T:
        timeout = self.timeout if timeout is None else timeout
        if timeout is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout)
        except asyncio.TimeoutError as exc:
            raise FetchTimeoutError(
                f"Fetching {url} exceeded {timeout}s.", url=url, format=self.format.name, **context
            ) from exc

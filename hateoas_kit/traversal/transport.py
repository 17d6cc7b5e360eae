"""Transport collaborator used by traversal sessions to fetch documents."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Protocol
from urllib.parse import urljoin

import requests


logger = logging.getLogger(__name__)


class TransportError(Exception):
    """A document could not be retrieved."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status: int | None = None,
        body: bytes | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status = status
        self.body = body


class Transport(Protocol):
    """Fetch the bytes behind a URL; failures raise TransportError."""

    async def get(self, url: str, *, accept: str | None = None) -> bytes: ...


class RequestsTransport:
    """Transport backed by a ``requests`` session, run in a worker thread.

    Any object with a requests-compatible ``get`` (returning a response with
    ``status_code`` and ``content``) can be passed as ``session``.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        session: Any | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = 30.0,
    ) -> None:
        self.base_url = base_url
        self.session = session if session is not None else requests.Session()
        self.headers = dict(headers or {})
        self.timeout = timeout

    def resolve(self, url: str) -> str:
        """Return ``url`` made absolute against ``base_url``."""
        return urljoin(self.base_url, url) if self.base_url else url

    async def get(self, url: str, *, accept: str | None = None) -> bytes:
        return await asyncio.to_thread(self._get, self.resolve(url), accept)

    def _get(self, url: str, accept: str | None) -> bytes:
        headers = dict(self.headers)
        if accept:
            headers["Accept"] = accept
        kwargs: dict[str, Any] = {"headers": headers}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url, **kwargs)
        except requests.RequestException as exc:
            raise TransportError(f"GET {url} failed: {exc}", url=url) from exc
        if response.status_code >= 400:
            raise TransportError(
                f"GET {url} returned HTTP {response.status_code}",
                url=url,
                status=response.status_code,
                body=response.content,
            )
        return response.content

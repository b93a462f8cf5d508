"""The HTTP GET primitive consumed by :class:`~eventloader.client.AsyncClient`.

The transport adapter only needs "GET this fully-resolved URL with these
headers and give me the status code and body text".  :class:`HttpGet`
describes that contract; :class:`HttpxGet` implements it with
:class:`httpx.AsyncClient`.  Tests inject an :class:`httpx.MockTransport`
through the ``transport`` argument.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from eventloader.models import RequestConfig


@dataclass(frozen=True)
class RawResponse:
    """Status code and undecoded body of an HTTP response."""

    status_code: int
    body: str


class HttpGet(Protocol):
    """Perform one HTTP GET.

    Implementations raise :class:`httpx.HTTPError` (or a subclass) on
    network, redirect and content-decoding failures; they never interpret
    the status code.
    """

    async def __call__(self, url: str, headers: dict[str, str]) -> RawResponse: ...


class HttpxGet:
    """:class:`HttpGet` backed by :class:`httpx.AsyncClient`.

    Must be used as an async context manager so that the connection pool
    is opened and closed properly.

    Args:
        config: Timeout and SSL settings.
        transport: Optional custom :class:`httpx.AsyncBaseTransport`, e.g.
            :class:`httpx.MockTransport` in tests.
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> HttpxGet:
        self._client = httpx.AsyncClient(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __call__(self, url: str, headers: dict[str, str]) -> RawResponse:
        assert self._client is not None, "HttpxGet not initialised -- use as async context manager"
        response = await self._client.get(url, headers=headers)
        return RawResponse(status_code=response.status_code, body=response.text)

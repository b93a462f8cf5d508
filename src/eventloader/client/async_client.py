"""Asynchronous transport adapter.

:class:`AsyncClient` turns a declarative GET description into one call on
an :class:`~eventloader.client.http.HttpGet` primitive and hands the raw
result to :func:`~eventloader.client.response.normalize_response`.

One ``get`` is one request; there is no retry loop.  Callers that want
retries wrap the loader, not the transport.

See Also:
    :mod:`eventloader.client.request` for URL and header construction.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from eventloader.client.http import HttpGet
from eventloader.client.request import merge_headers, resolve_url
from eventloader.client.response import normalize_response
from eventloader.exceptions import ConnectionError_
from eventloader.json_types import JSONValue

logger = logging.getLogger(__name__)


class AsyncClient:
    """Non-blocking GET adapter with status-code classification.

    Args:
        http: The HTTP GET primitive, typically an entered
            :class:`~eventloader.client.http.HttpxGet`.
        base_url: Prefix for relative URL templates.
        headers: Headers sent with every request, layered between the
            JSON defaults and per-call headers.

    Example::

        async with HttpxGet() as http:
            client = AsyncClient(http, base_url="https://api.example.com")
            event = await client.get("/events/:id", {"id": "g1"})
    """

    def __init__(
        self,
        http: HttpGet,
        base_url: Optional[str] = None,
        headers: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._http = http
        self._base_url = base_url
        self._headers = dict(headers or {})

    async def get(
        self,
        url_template: str,
        path_params: Optional[Mapping[str, Any]] = None,
        query_params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, Any]] = None,
    ) -> Optional[JSONValue]:
        """Send a GET request and normalise the response.

        Args:
            url_template: URL or path with ``:name`` tokens.
            path_params: Values for the template tokens.
            query_params: Query parameters, appended in the given order.
            headers: Per-call headers; win over profile and default headers.

        Returns:
            The decoded JSON object or array, or ``None`` for no content.

        Raises:
            SessionExpiredError: On 401.
            UnexpectedStatusError: On any other non-2xx status.
            MalformedPayloadError: When a 2xx body is not a JSON object or array.
            ConnectionError_: On network or timeout errors, redirect loops, and
                bodies that fail content decoding.
        """
        url = resolve_url(self._base_url, url_template, path_params, query_params)
        merged_headers = merge_headers(self._headers, headers)

        logger.debug("GET %s", url)
        try:
            response = await self._http(url, merged_headers)
        except httpx.HTTPError as exc:
            raise ConnectionError_(f"GET {url} failed: {exc}") from exc

        logger.debug("GET %s -> %d", url, response.status_code)
        return normalize_response(response)

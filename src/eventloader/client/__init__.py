"""HTTP transport for eventloader.

Turns a declarative GET description (URL template, path parameters, query
parameters, headers) into a single HTTP call and normalises the response
into a JSON value, ``None`` for "no content", or a classified
:class:`~eventloader.exceptions.EventLoaderError`.

Classes:
    :class:`AsyncClient` -- the transport adapter used by the remote loader.
    :class:`HttpxGet` -- the default HTTP GET primitive, backed by
    :class:`httpx.AsyncClient`.

Example::

    from eventloader.client import AsyncClient, HttpxGet

    async with HttpxGet(profile.request) as http:
        client = AsyncClient(http, base_url="https://api.example.com")
        payload = await client.get("/events/:id", {"id": "g1"})
"""

from eventloader.client.async_client import AsyncClient
from eventloader.client.http import HttpGet, HttpxGet, RawResponse

__all__ = ["AsyncClient", "HttpGet", "HttpxGet", "RawResponse"]

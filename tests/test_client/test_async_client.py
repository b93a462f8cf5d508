"""Tests for the asynchronous transport adapter."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from eventloader.client import AsyncClient, HttpxGet, RawResponse
from eventloader.exceptions import (
    ConnectionError_,
    MalformedPayloadError,
    SessionExpiredError,
    UnexpectedStatusError,
)
from eventloader.models import RequestConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class RecordingHandler:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status_code: int = 200, json: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self.json = json
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.json is not None:
            return httpx.Response(self.status_code, json=self.json)
        return httpx.Response(self.status_code, text=self.text or "")


# ---------------------------------------------------------------------------
# HttpxGet
# ---------------------------------------------------------------------------


class TestHttpxGet:
    @pytest.mark.asyncio
    async def test_returns_status_and_body(self) -> None:
        handler = RecordingHandler(200, text='{"id": "g1"}')
        async with HttpxGet(transport=httpx.MockTransport(handler)) as http:
            response = await http("https://api.example.com/events/g1", {"accept": "application/json"})
        assert response == RawResponse(200, '{"id": "g1"}')
        assert handler.requests[0].method == "GET"
        assert handler.requests[0].headers["accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_context_manager_opens_and_closes(self) -> None:
        http = HttpxGet(RequestConfig(timeout=5))
        assert http._client is None
        async with http:
            assert http._client is not None
        assert http._client is None


# ---------------------------------------------------------------------------
# AsyncClient.get
# ---------------------------------------------------------------------------


async def _get(handler: RecordingHandler, **kwargs: Any) -> Any:
    async with HttpxGet(transport=httpx.MockTransport(handler)) as http:
        client = AsyncClient(http, base_url="https://api.example.com", headers={"x-team": "t7"})
        return await client.get("/events/:id", **kwargs)


class TestGet:
    @pytest.mark.asyncio
    async def test_decodes_payload(self) -> None:
        handler = RecordingHandler(200, json={"id": "g1"})
        assert await _get(handler, path_params={"id": "g1"}) == {"id": "g1"}

    @pytest.mark.asyncio
    async def test_builds_url(self) -> None:
        handler = RecordingHandler(200, json={})
        await _get(handler, path_params={"id": "g1"}, query_params={"expand": "players", "v": 2})
        assert str(handler.requests[0].url) == "https://api.example.com/events/g1?expand=players&v=2"

    @pytest.mark.asyncio
    async def test_missing_path_param_sent_literally(self) -> None:
        handler = RecordingHandler(200, json={})
        await _get(handler)
        assert handler.requests[0].url.path == "/events/:id"

    @pytest.mark.asyncio
    async def test_headers_layered(self) -> None:
        handler = RecordingHandler(200, json={})
        await _get(handler, path_params={"id": "g1"}, headers={"Accept": "application/vnd.api+json"})
        sent = handler.requests[0].headers
        assert sent["content-type"] == "application/json"
        assert sent["accept"] == "application/vnd.api+json"
        assert sent["x-team"] == "t7"

    @pytest.mark.asyncio
    async def test_no_content(self) -> None:
        assert await _get(RecordingHandler(204), path_params={"id": "g1"}) is None

    @pytest.mark.asyncio
    async def test_401(self) -> None:
        with pytest.raises(SessionExpiredError):
            await _get(RecordingHandler(401), path_params={"id": "g1"})

    @pytest.mark.asyncio
    async def test_500(self) -> None:
        with pytest.raises(UnexpectedStatusError) as excinfo:
            await _get(RecordingHandler(500), path_params={"id": "g1"})
        assert excinfo.value.status_code == 500

    @pytest.mark.asyncio
    async def test_malformed(self) -> None:
        with pytest.raises(MalformedPayloadError):
            await _get(RecordingHandler(200, text="not json"), path_params={"id": "g1"})

    @pytest.mark.asyncio
    async def test_single_request_no_retry(self) -> None:
        handler = RecordingHandler(503)
        with pytest.raises(UnexpectedStatusError):
            await _get(handler, path_params={"id": "g1"})
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc",
        [
            httpx.ConnectError("connection refused"),
            httpx.ReadTimeout("timed out"),
            httpx.TooManyRedirects("Exceeded maximum allowed redirects."),
            httpx.DecodingError("incorrect header check"),
        ],
    )
    async def test_network_errors_classified(self, exc: Exception) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise exc

        async with HttpxGet(transport=httpx.MockTransport(handler)) as http:
            client = AsyncClient(http, base_url="https://api.example.com")
            with pytest.raises(ConnectionError_) as excinfo:
                await client.get("/events/:id", {"id": "g1"})
        assert excinfo.value.__cause__ is exc

    @pytest.mark.asyncio
    async def test_redirect_loop_classified(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"location": str(request.url)})

        async with HttpxGet(transport=httpx.MockTransport(handler)) as http:
            client = AsyncClient(http, base_url="https://api.example.com")
            with pytest.raises(ConnectionError_) as excinfo:
                await client.get("/events/:id", {"id": "g1"})
        assert isinstance(excinfo.value.__cause__, httpx.TooManyRedirects)

    @pytest.mark.asyncio
    async def test_undecodable_body_classified(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"content-encoding": "gzip"}, content=b"not gzip")

        async with HttpxGet(transport=httpx.MockTransport(handler)) as http:
            client = AsyncClient(http, base_url="https://api.example.com")
            with pytest.raises(ConnectionError_) as excinfo:
                await client.get("/events/:id", {"id": "g1"})
        assert isinstance(excinfo.value.__cause__, httpx.DecodingError)

"""Tests for the remote-backed and cache-backed loaders."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from eventloader.cache import DiskBlobStore, JsonCache
from eventloader.client import AsyncClient
from eventloader.exceptions import (
    AbsentError,
    CacheMissError,
    ConnectionError_,
    EmptyResponseError,
    MappingError,
    SessionExpiredError,
)
from eventloader.loaders import CacheLoader, RemoteLoader
from eventloader.mapper import EventMapper
from eventloader.result import Failed, Loaded, Source


def _remote(http, **kwargs: Any) -> RemoteLoader:
    client = AsyncClient(http, base_url="https://api.example.com")
    return RemoteLoader(client, EventMapper(), **kwargs)


@pytest.fixture()
def cache(tmp_path, clock):
    c = JsonCache(DiskBlobStore(tmp_path, clock=clock))
    yield c
    c.close()


# ---------------------------------------------------------------------------
# RemoteLoader
# ---------------------------------------------------------------------------


class TestRemoteLoader:
    @pytest.mark.asyncio
    async def test_maps_payload(self, make_http, event_json, event) -> None:
        http = make_http(200, event_json)
        assert await _remote(http).load("g1") == event
        assert http.calls[0][0] == "https://api.example.com/events/g1"

    @pytest.mark.asyncio
    async def test_custom_path_and_query(self, make_http, event_json) -> None:
        http = make_http(200, event_json)
        loader = _remote(http, path_template="/v2/games/:id", query_params={"expand": "players"})
        await loader.load("g1")
        assert http.calls[0][0] == "https://api.example.com/v2/games/g1?expand=players"

    @pytest.mark.asyncio
    async def test_empty_response(self, make_http) -> None:
        with pytest.raises(EmptyResponseError, match="g1"):
            await _remote(make_http(204)).load("g1")

    @pytest.mark.asyncio
    async def test_shape_mismatch_is_mapping_error(self, make_http) -> None:
        with pytest.raises(MappingError):
            await _remote(make_http(200, {"id": "g1"})).load("g1")

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self, make_http) -> None:
        with pytest.raises(SessionExpiredError):
            await _remote(make_http(401)).load("g1")
        with pytest.raises(ConnectionError_):
            await _remote(make_http(httpx.ConnectError("refused"))).load("g1")

    @pytest.mark.asyncio
    async def test_attempt_success(self, make_http, event_json, event) -> None:
        outcome = await _remote(make_http(200, event_json)).attempt("g1")
        assert outcome == Loaded(event, Source.REMOTE)

    @pytest.mark.asyncio
    async def test_attempt_failure(self, make_http) -> None:
        outcome = await _remote(make_http(500)).attempt("g1")
        assert isinstance(outcome, Failed)
        assert outcome.error.status_code == 500


# ---------------------------------------------------------------------------
# CacheLoader
# ---------------------------------------------------------------------------


class TestCacheLoader:
    def test_key_for(self, cache: JsonCache) -> None:
        assert CacheLoader(cache, EventMapper()).key_for("g1") == "events:g1"
        assert CacheLoader(cache, EventMapper(), namespace="games").key_for("g1") == "games:g1"

    @pytest.mark.asyncio
    async def test_hit(self, cache: JsonCache, event_json, event) -> None:
        await cache.save("events:g1", event_json)
        assert await CacheLoader(cache, EventMapper()).load("g1") == event

    @pytest.mark.asyncio
    async def test_miss(self, cache: JsonCache) -> None:
        with pytest.raises(CacheMissError) as excinfo:
            await CacheLoader(cache, EventMapper()).load("g1")
        assert excinfo.value.key == "events:g1"
        assert isinstance(excinfo.value, AbsentError)

    @pytest.mark.asyncio
    async def test_stale_is_miss(self, cache: JsonCache, event_json, clock) -> None:
        await cache.save("events:g1", event_json, max_age=60)
        clock.advance(61)
        with pytest.raises(CacheMissError):
            await CacheLoader(cache, EventMapper()).load("g1")

    @pytest.mark.asyncio
    async def test_cached_shape_mismatch(self, cache: JsonCache) -> None:
        await cache.save("events:g1", {"id": "g1", "title": 7})
        with pytest.raises(MappingError):
            await CacheLoader(cache, EventMapper()).load("g1")

    @pytest.mark.asyncio
    async def test_attempt_reports_cache_source(self, cache: JsonCache, event_json, event) -> None:
        await cache.save("events:g1", event_json)
        outcome = await CacheLoader(cache, EventMapper()).attempt("g1")
        assert outcome == Loaded(event, Source.CACHE)

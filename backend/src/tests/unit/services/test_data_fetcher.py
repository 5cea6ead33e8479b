"""
Unit tests for the polling fetcher.

HTTP traffic goes through ``httpx.MockTransport`` so each test controls the
exact response the endpoint returns.
"""

import json
from datetime import UTC, datetime

import httpx
import pytest

from inkboard.core.exceptions import (
    DatabaseTransactionError,
    HttpStatusError,
    InvalidJsonError,
    TransportFailureError,
    UpstreamErrorFieldError,
)
from inkboard.services.data_fetcher import (
    PluginDataFetcher,
    build_request_headers,
    close_shared_client,
    parse_polling_headers,
)
from inkboard.services.data_store import InMemoryPluginDataStore

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=UTC)
PREVIOUS = datetime(2025, 6, 1, 11, 0, 0, tzinfo=UTC)


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _fetcher(handler, mock_settings, store=None):
    store = store if store is not None else InMemoryPluginDataStore()
    return PluginDataFetcher(store, client=_client(handler), settings=mock_settings, clock=lambda: NOW), store


class TestParsePollingHeaders:
    def test_parses_lines(self):
        raw = "Authorization: Bearer abc\nX-Api-Key: 123"
        assert parse_polling_headers(raw) == [("Authorization", "Bearer abc"), ("X-Api-Key", "123")]

    def test_value_may_contain_colons(self):
        assert parse_polling_headers("Referer: https://example.com:8080/x") == [
            ("Referer", "https://example.com:8080/x")
        ]

    def test_skips_lines_without_colon_or_name(self):
        raw = "\n  garbage line\n: orphan\nAccept: text/plain\n"
        assert parse_polling_headers(raw) == [("Accept", "text/plain")]

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty(self, raw):
        assert parse_polling_headers(raw) == []

    def test_configured_headers_override_baseline(self, make_plugin):
        plugin = make_plugin(polling_headers="Accept: text/csv\nX-Token: t")
        headers = build_request_headers(plugin, "agent/1")
        assert headers == {"User-Agent": "agent/1", "Accept": "text/csv", "X-Token": "t"}


class TestRefreshSuccess:
    @pytest.mark.asyncio
    async def test_round_trip_payload(self, make_plugin, mock_settings):
        plugin = make_plugin()

        def handler(request):
            return httpx.Response(200, json={"temperature": 25, "humidity": 60})

        fetcher, store = _fetcher(handler, mock_settings)
        result = await fetcher.refresh(plugin)

        assert result.is_ok
        assert result.status == "success"
        assert plugin.cached_payload == {"temperature": 25, "humidity": 60}
        assert plugin.cached_payload_updated_at == NOW
        assert await store.snapshot(plugin) == ({"temperature": 25, "humidity": 60}, NOW)

    @pytest.mark.asyncio
    async def test_sends_headers_and_get(self, make_plugin, mock_settings):
        plugin = make_plugin(polling_headers="Authorization: Bearer secret")
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["headers"] = request.headers
            seen["url"] = str(request.url)
            return httpx.Response(200, json=[1, 2, 3])

        fetcher, _ = _fetcher(handler, mock_settings)
        result = await fetcher.refresh(plugin)

        assert result.is_ok
        assert seen["method"] == "GET"
        assert seen["url"] == "https://api.example.com/weather"
        assert seen["headers"]["authorization"] == "Bearer secret"
        assert seen["headers"]["user-agent"] == "inkboard-test"
        assert seen["headers"]["accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_post_sends_body(self, make_plugin, mock_settings):
        body = json.dumps({"query": "{ viewer { login } }"})
        plugin = make_plugin(polling_method="POST", polling_body=body)
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["content"] = request.content
            return httpx.Response(200, json={"viewer": {"login": "octo"}})

        fetcher, _ = _fetcher(handler, mock_settings)
        assert (await fetcher.refresh(plugin)).is_ok
        assert seen["method"] == "POST"
        assert seen["content"] == body.encode("utf-8")

    @pytest.mark.asyncio
    async def test_post_without_body(self, make_plugin, mock_settings):
        plugin = make_plugin(polling_method="post", polling_body=None)
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["content"] = request.content
            return httpx.Response(200, json={"ok": True})

        fetcher, _ = _fetcher(handler, mock_settings)
        assert (await fetcher.refresh(plugin)).is_ok
        assert seen == {"method": "POST", "content": b""}

    @pytest.mark.asyncio
    async def test_non_ascii_header_value_sent_as_utf8(self, make_plugin, mock_settings):
        plugin = make_plugin(polling_headers="X-City: Zürich")
        seen = {}

        def handler(request):
            seen["raw"] = dict(request.headers.raw)
            return httpx.Response(200, json={"city": "Zürich"})

        fetcher, _ = _fetcher(handler, mock_settings)
        result = await fetcher.refresh(plugin)

        assert result.is_ok
        assert seen["raw"][b"X-City"] == "Zürich".encode("utf-8")

    @pytest.mark.asyncio
    async def test_shared_client_built_from_settings(self, mock_settings):
        fetcher = PluginDataFetcher(InMemoryPluginDataStore(), settings=mock_settings)
        client = fetcher._get_client()
        try:
            assert fetcher._get_client() is client
            assert client.follow_redirects is False
            assert client.timeout.read == 5.0
        finally:
            await close_shared_client()
        assert client.is_closed


class TestRefreshFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [500, 404, 301, 401])
    async def test_non_success_status_leaves_cache(self, make_plugin, mock_settings, status):
        plugin = make_plugin(cached_payload={"old": True}, cached_payload_updated_at=PREVIOUS)

        def handler(request):
            return httpx.Response(status, json={"img": "a", "title": "b"})

        fetcher, _ = _fetcher(handler, mock_settings)
        result = await fetcher.refresh(plugin)

        assert result.is_error
        assert isinstance(result.error, HttpStatusError)
        assert result.error.status == status
        assert result.error.message == f"HTTP request failed with status: {status}"
        assert plugin.cached_payload == {"old": True}
        assert plugin.cached_payload_updated_at == PREVIOUS

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            "invalid json",
            "",
            "{'single': 'quotes'}",
            "NaN",
            "Infinity",
            "-Infinity",
            '{"reading": NaN}',
            "[" * 100_000 + "]" * 100_000,
        ],
        ids=["text", "empty", "single-quotes", "nan", "infinity", "neg-infinity", "nested-nan", "deep-nesting"],
    )
    async def test_invalid_json(self, make_plugin, mock_settings, body):
        plugin = make_plugin(cached_payload={"old": True}, cached_payload_updated_at=PREVIOUS)

        def handler(request):
            return httpx.Response(200, text=body)

        fetcher, _ = _fetcher(handler, mock_settings)
        result = await fetcher.refresh(plugin)

        assert isinstance(result.error, InvalidJsonError)
        assert result.error.message == "Invalid JSON response received from polling URL"
        assert plugin.cached_payload == {"old": True}

    @pytest.mark.asyncio
    async def test_transport_failure(self, make_plugin, mock_settings):
        plugin = make_plugin(cached_payload={"old": True}, cached_payload_updated_at=PREVIOUS)

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        fetcher, _ = _fetcher(handler, mock_settings)
        result = await fetcher.refresh(plugin)

        assert isinstance(result.error, TransportFailureError)
        assert "connection refused" in result.error.message
        assert plugin.cached_payload_updated_at == PREVIOUS

    @pytest.mark.asyncio
    async def test_unencodable_header_name_is_reported(self, make_plugin, mock_settings):
        plugin = make_plugin(polling_headers="X-Stadt-Zürich: 1", cached_payload_updated_at=PREVIOUS)

        def handler(request):
            return httpx.Response(200, json={"a": 1})

        fetcher, _ = _fetcher(handler, mock_settings)
        result = await fetcher.refresh(plugin)

        assert isinstance(result.error, TransportFailureError)
        assert plugin.cached_payload_updated_at == PREVIOUS

    @pytest.mark.asyncio
    async def test_timeout_is_transport_failure(self, make_plugin, mock_settings):
        plugin = make_plugin()

        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        fetcher, _ = _fetcher(handler, mock_settings)
        result = await fetcher.refresh(plugin)
        assert isinstance(result.error, TransportFailureError)

    @pytest.mark.asyncio
    async def test_validation_failure_leaves_cache(self, make_plugin, mock_settings):
        plugin = make_plugin(cached_payload={"old": True}, cached_payload_updated_at=PREVIOUS)

        def handler(request):
            return httpx.Response(200, json={"error": "quota exceeded"})

        fetcher, store = _fetcher(handler, mock_settings)
        result = await fetcher.refresh(plugin)

        assert isinstance(result.error, UpstreamErrorFieldError)
        assert plugin.cached_payload == {"old": True}
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_store_failure_is_returned(self, make_plugin, mock_settings):
        plugin = make_plugin()

        class FailingStore(InMemoryPluginDataStore):
            async def replace_payload(self, plugin, payload, updated_at):
                raise DatabaseTransactionError("deadlock")

        def handler(request):
            return httpx.Response(200, json={"a": 1})

        fetcher, _ = _fetcher(handler, mock_settings, store=FailingStore())
        result = await fetcher.refresh(plugin)
        assert isinstance(result.error, DatabaseTransactionError)

    def test_raise_for_error(self):
        from inkboard.core.result import Result

        with pytest.raises(HttpStatusError):
            Result.err(HttpStatusError(503)).raise_for_error()


class TestRefreshSkipped:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [{"refresh_strategy": "webhook"}, {"refresh_strategy": "static"}, {"polling_endpoint": None}])
    async def test_not_polled(self, make_plugin, mock_settings, overrides):
        plugin = make_plugin(**overrides)
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"a": 1})

        fetcher, _ = _fetcher(handler, mock_settings)
        result = await fetcher.refresh(plugin)

        assert result.status == "skipped"
        assert result.is_ok
        assert calls == []

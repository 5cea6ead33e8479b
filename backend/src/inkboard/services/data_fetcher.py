"""Polling fetcher for plugin data.

One refresh issues exactly one HTTP request, validates the decoded body and,
only when every check passes, replaces the cached payload. There is no retry
or backoff here; callers own any retry policy.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import httpx

from ..core.config import Settings, get_settings_instance
from ..core.exceptions import (
    HttpStatusError,
    InkboardException,
    InvalidJsonError,
    TransportFailureError,
)
from ..core.logging import get_logger
from ..core.result import Result
from ..models.plugin import Plugin, PollingMethod, RefreshStrategy
from .data_store import PluginDataStore
from .response_validation import decode_json, validate_response_data

logger = get_logger(__name__)


def parse_polling_headers(raw: str | None) -> list[tuple[str, str]]:
    """Parse a newline-delimited ``Name: Value`` block into ordered pairs.

    Each line is split on its first colon, so values may themselves contain
    colons (URLs, tokens). Lines without a colon are ignored.
    """
    if not raw:
        return []
    pairs: list[tuple[str, str]] = []
    for line in raw.strip().split("\n"):
        name, sep, value = line.partition(":")
        if not sep:
            continue
        name = name.strip()
        if not name:
            continue
        pairs.append((name, value.strip()))
    return pairs


def build_request_headers(plugin: Plugin, user_agent: str) -> dict[str, str]:
    headers = {"User-Agent": user_agent, "Accept": "application/json"}
    for name, value in parse_polling_headers(plugin.polling_headers):
        headers[name] = value
    return headers


def _encode_header_values(headers: dict[str, str]) -> dict[str, bytes]:
    # httpx only encodes str values as ASCII; send UTF-8 bytes instead
    return {name: value.encode("utf-8") for name, value in headers.items()}


# Shared pooled client for fetchers that are not handed one explicitly
_shared_client: httpx.AsyncClient | None = None


def _build_client(settings: Settings) -> httpx.AsyncClient:
    logger.debug("Creating shared polling client")
    return httpx.AsyncClient(
        limits=httpx.Limits(max_keepalive_connections=20, max_connections=100, keepalive_expiry=30.0),
        timeout=httpx.Timeout(settings.polling_timeout),
        follow_redirects=settings.polling_follow_redirects,
    )


async def close_shared_client() -> None:
    """Close the shared polling client (call during shutdown)."""
    global _shared_client  # noqa: PLW0603
    if _shared_client is not None:
        await _shared_client.aclose()
        _shared_client = None


class PluginDataFetcher:
    """Fetch, validate and store a polling plugin's payload."""

    def __init__(
        self,
        store: PluginDataStore,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self._client = client
        self.settings = settings or get_settings_instance()
        self._clock = clock or (lambda: datetime.now(UTC))

    def _get_client(self) -> httpx.AsyncClient:
        global _shared_client  # noqa: PLW0603
        if self._client is not None:
            return self._client
        if _shared_client is None or _shared_client.is_closed:
            _shared_client = _build_client(self.settings)
        return _shared_client

    async def _send(self, plugin: Plugin) -> httpx.Response:
        client = self._get_client()
        headers = _encode_header_values(build_request_headers(plugin, self.settings.polling_user_agent))
        kwargs: dict[str, Any] = {"headers": headers, "timeout": self.settings.polling_timeout}

        method = "GET"
        if plugin.method == PollingMethod.POST:
            method = "POST"
            if plugin.polling_body:
                kwargs["content"] = plugin.polling_body.encode("utf-8")

        logger.info(
            "plugin.poll",
            extra={"plugin_id": plugin.id, "plugin_uuid": plugin.uuid, "method": method, "url": plugin.polling_endpoint},
        )
        return await client.request(method, plugin.polling_endpoint, **kwargs)

    async def refresh(self, plugin: Plugin) -> Result:
        """Run one fetch/validate/update cycle for ``plugin``.

        Returns ``Result.skipped()`` for non-polling plugins or plugins without
        an endpoint, ``Result.err(...)`` for any failure (cache untouched) and
        ``Result.ok()`` once the payload has been replaced.
        """
        if plugin.strategy != RefreshStrategy.POLLING or not plugin.polling_endpoint:
            return Result.skipped("plugin is not configured for polling")

        url = plugin.polling_endpoint
        try:
            response = await self._send(plugin)
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as e:
            logger.warning(
                "Polling request failed before a response arrived",
                extra={"plugin_id": plugin.id, "url": url, "error": str(e)},
            )
            return Result.err(TransportFailureError(url, str(e) or e.__class__.__name__))

        status = int(response.status_code)
        if not 200 <= status < 300:
            logger.warning("Polling endpoint returned non-success status", extra={"plugin_id": plugin.id, "url": url, "status": status})
            return Result.err(HttpStatusError(status))

        body = response.text
        try:
            # A literal ``null`` body decodes to None and is left to the validator
            payload = decode_json(body)
        except ValueError:
            logger.warning("Polling endpoint returned invalid JSON", extra={"plugin_id": plugin.id, "url": url})
            return Result.err(InvalidJsonError(details={"body_preview": body[:200]}))

        outcome = validate_response_data(payload)
        if outcome.is_error:
            logger.warning(
                "Polling payload failed validation",
                extra={"plugin_id": plugin.id, "url": url, "error_code": outcome.error.error_code},
            )
            return outcome

        try:
            await self.store.replace_payload(plugin, payload, self._clock())
        except InkboardException as e:
            return Result.err(e)

        logger.info("Plugin payload refreshed", extra={"plugin_id": plugin.id, "url": url})
        return Result.ok()

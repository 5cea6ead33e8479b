"""Refresh orchestration for plugins.

Wires the freshness check to the fetcher and serializes refreshes of the
same plugin, so an in-flight update is never overwritten by an older one.
Different plugins refresh independently. Scheduling stays with the caller.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any

from ..core.config import Settings, get_settings_instance
from ..core.exceptions import InkboardException
from ..core.logging import get_logger
from ..core.result import Result
from ..models.plugin import Plugin, RefreshStrategy
from .data_fetcher import PluginDataFetcher
from .data_store import PluginDataStore
from .freshness import is_stale

logger = get_logger(__name__)


class _KeyedLock:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class PluginRefreshService:
    def __init__(
        self,
        store: PluginDataStore,
        fetcher: PluginDataFetcher | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.settings = settings or get_settings_instance()
        self._clock = clock or (lambda: datetime.now(UTC))
        self.fetcher = fetcher or PluginDataFetcher(store, settings=self.settings, clock=self._clock)
        self._locks: dict[str, _KeyedLock] = {}

    @asynccontextmanager
    async def _lock_for(self, plugin: Plugin) -> AsyncIterator[None]:
        """Hold the plugin's lock; the entry is dropped once nobody holds or awaits it."""
        key = plugin.uuid
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = _KeyedLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0 and self._locks.get(key) is entry:
                del self._locks[key]

    def is_stale(self, plugin: Plugin) -> bool:
        window = timedelta(minutes=self.settings.webhook_freshness_minutes)
        return is_stale(plugin, now=self._clock(), webhook_window=window)

    async def refresh(self, plugin: Plugin) -> Result:
        """Fetch unconditionally, serialized per plugin."""
        async with self._lock_for(plugin):
            return await self.fetcher.refresh(plugin)

    async def refresh_if_stale(self, plugin: Plugin) -> Result:
        """Fetch only when the evaluator reports the cache as due.

        Staleness is re-checked after the lock is taken so that a refresh
        queued behind another one does not fetch again needlessly.
        """
        if not self.is_stale(plugin):
            return Result.skipped("cached payload is fresh")
        async with self._lock_for(plugin):
            if not self.is_stale(plugin):
                return Result.skipped("cached payload is fresh")
            result = await self.fetcher.refresh(plugin)
        if result.is_error:
            logger.info("Refresh failed", extra={"plugin_id": plugin.id, "error_code": result.error.error_code})
        return result

    async def accept_webhook(self, plugin: Plugin, payload: Any) -> Result:
        """Store a payload delivered by webhook through the same atomic update."""
        if plugin.strategy != RefreshStrategy.WEBHOOK:
            return Result.skipped("plugin does not accept webhook deliveries")
        async with self._lock_for(plugin):
            try:
                await self.store.replace_payload(plugin, payload, self._clock())
            except InkboardException as e:
                return Result.err(e)
        logger.info("Webhook payload stored", extra={"plugin_id": plugin.id})
        return Result.ok()

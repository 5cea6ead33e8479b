"""Atomic replacement of a plugin's cached payload.

The payload and its timestamp always move together: either both are written
or neither is. Two stores share one protocol: a SQLAlchemy-backed store for
deployments and an in-memory store for tests and single-process embedding.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Callable
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_async_session_local
from ..core.exceptions import DatabaseTransactionError
from ..core.logging import get_logger
from ..models.plugin import Plugin

logger = get_logger(__name__)


@runtime_checkable
class PluginDataStore(Protocol):
    async def replace_payload(self, plugin: Plugin, payload: Any, updated_at: datetime) -> None:
        """Replace ``cached_payload`` and ``cached_payload_updated_at`` as one transition."""
        ...

    async def snapshot(self, plugin: Plugin) -> tuple[Any, datetime | None]:
        """Return a consistent ``(payload, updated_at)`` pair for rendering."""
        ...


class DatabasePluginDataStore:
    """Writes both cache columns in a single UPDATE, then commits."""

    def __init__(self, session_factory: Callable[[], AsyncSession] | None = None):
        self._session_factory = session_factory or get_async_session_local()

    async def replace_payload(self, plugin: Plugin, payload: Any, updated_at: datetime) -> None:
        stmt = (
            update(Plugin)
            .where(Plugin.id == plugin.id)
            .values(cached_payload=payload, cached_payload_updated_at=updated_at)
        )
        async with self._session_factory() as session:
            try:
                await session.execute(stmt)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Cache update failed", extra={"plugin_id": plugin.id, "error": str(e)})
                raise DatabaseTransactionError(f"cache update for plugin '{plugin.id}': {e!s}") from e

        # Mirror the committed state on the caller's instance
        plugin.cached_payload = payload
        plugin.cached_payload_updated_at = updated_at
        logger.debug("Plugin cache replaced", extra={"plugin_id": plugin.id})

    async def snapshot(self, plugin: Plugin) -> tuple[Any, datetime | None]:
        async with self._session_factory() as session:
            row = await session.get(Plugin, plugin.id)
            if row is None:
                return plugin.cached_payload, plugin.cached_payload_updated_at
            return row.cached_payload, row.cached_payload_updated_at


class InMemoryPluginDataStore:
    """Process-local store keyed by plugin uuid.

    Writes are applied under a lock and assign both attributes back to back
    with no await in between, so no reader observes a half-applied update.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[Any, datetime]] = {}
        self._lock = asyncio.Lock()

    async def replace_payload(self, plugin: Plugin, payload: Any, updated_at: datetime) -> None:
        stored = copy.deepcopy(payload)
        async with self._lock:
            self._entries[plugin.uuid] = (stored, updated_at)
            plugin.cached_payload = payload
            plugin.cached_payload_updated_at = updated_at

    async def snapshot(self, plugin: Plugin) -> tuple[Any, datetime | None]:
        async with self._lock:
            entry = self._entries.get(plugin.uuid)
        if entry is None:
            return plugin.cached_payload, plugin.cached_payload_updated_at
        payload, updated_at = entry
        return copy.deepcopy(payload), updated_at

    def __len__(self) -> int:
        return len(self._entries)

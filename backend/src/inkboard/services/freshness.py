"""Freshness evaluation for plugin cached payloads.

Pure decision logic: no I/O, no side effects. Callers ask ``is_stale`` before
deciding whether to trigger a fetch.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from ..models.plugin import Plugin, RefreshStrategy

WEBHOOK_FRESHNESS_WINDOW = timedelta(minutes=60)


def _as_utc(ts: datetime) -> datetime:
    # Naive timestamps come back from drivers without tz support
    if ts.tzinfo is None:
        return ts.replace(tzinfo=UTC)
    return ts


def is_stale(
    plugin: Plugin,
    now: datetime | None = None,
    webhook_window: timedelta = WEBHOOK_FRESHNESS_WINDOW,
) -> bool:
    """Return True when the plugin's cached payload is due for a refresh.

    Webhook plugins are fresh only while the last delivery is strictly newer
    than ``now - webhook_window``. Every other strategy is stale when it has
    never been updated or has no threshold, and otherwise once
    ``updated_at + threshold`` is at or before ``now``.
    """
    now = _as_utc(now or datetime.now(UTC))
    updated_at = plugin.cached_payload_updated_at

    if plugin.strategy == RefreshStrategy.WEBHOOK:
        if updated_at is None:
            return True
        return not _as_utc(updated_at) > now - webhook_window

    threshold = plugin.staleness_threshold_minutes
    if updated_at is None or not threshold:
        return True

    return _as_utc(updated_at) + timedelta(minutes=int(threshold)) <= now

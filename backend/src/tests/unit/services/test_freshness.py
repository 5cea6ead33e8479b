"""
Unit tests for cached payload freshness evaluation.
"""

from datetime import UTC, datetime, timedelta

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from inkboard.services.freshness import is_stale

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=UTC)


class TestPollingFreshness:
    def test_never_updated_is_stale(self, make_plugin):
        plugin = make_plugin(cached_payload_updated_at=None)
        assert is_stale(plugin, now=NOW) is True

    def test_within_threshold_is_fresh(self, make_plugin):
        plugin = make_plugin(staleness_threshold_minutes=15, cached_payload_updated_at=NOW - timedelta(minutes=14))
        assert is_stale(plugin, now=NOW) is False

    def test_exactly_at_threshold_is_stale(self, make_plugin):
        plugin = make_plugin(staleness_threshold_minutes=15, cached_payload_updated_at=NOW - timedelta(minutes=15))
        assert is_stale(plugin, now=NOW) is True

    def test_past_threshold_is_stale(self, make_plugin):
        plugin = make_plugin(staleness_threshold_minutes=15, cached_payload_updated_at=NOW - timedelta(hours=2))
        assert is_stale(plugin, now=NOW) is True

    @pytest.mark.parametrize("threshold", [None, 0])
    def test_missing_threshold_is_stale(self, make_plugin, threshold):
        plugin = make_plugin(staleness_threshold_minutes=threshold, cached_payload_updated_at=NOW)
        assert is_stale(plugin, now=NOW) is True

    def test_static_strategy_uses_threshold(self, make_plugin):
        plugin = make_plugin(
            refresh_strategy="static",
            staleness_threshold_minutes=60,
            cached_payload_updated_at=NOW - timedelta(minutes=5),
        )
        assert is_stale(plugin, now=NOW) is False

    def test_naive_timestamp_treated_as_utc(self, make_plugin):
        naive = (NOW - timedelta(minutes=5)).replace(tzinfo=None)
        plugin = make_plugin(staleness_threshold_minutes=15, cached_payload_updated_at=naive)
        assert is_stale(plugin, now=NOW) is False


class TestWebhookFreshness:
    def test_never_delivered_is_stale(self, make_plugin):
        plugin = make_plugin(refresh_strategy="webhook", cached_payload_updated_at=None)
        assert is_stale(plugin, now=NOW) is True

    def test_recent_delivery_is_fresh(self, make_plugin):
        plugin = make_plugin(refresh_strategy="webhook", cached_payload_updated_at=NOW - timedelta(minutes=59))
        assert is_stale(plugin, now=NOW) is False

    def test_delivery_exactly_sixty_minutes_ago_is_stale(self, make_plugin):
        plugin = make_plugin(refresh_strategy="webhook", cached_payload_updated_at=NOW - timedelta(minutes=60))
        assert is_stale(plugin, now=NOW) is True

    def test_ignores_polling_threshold(self, make_plugin):
        plugin = make_plugin(
            refresh_strategy="webhook",
            staleness_threshold_minutes=5,
            cached_payload_updated_at=NOW - timedelta(minutes=30),
        )
        assert is_stale(plugin, now=NOW) is False

    def test_custom_window(self, make_plugin):
        plugin = make_plugin(refresh_strategy="webhook", cached_payload_updated_at=NOW - timedelta(minutes=10))
        assert is_stale(plugin, now=NOW, webhook_window=timedelta(minutes=5)) is True


class TestFreshnessProperties:
    @given(
        strategy=st.sampled_from(["polling", "webhook", "static"]),
        threshold=st.one_of(st.none(), st.integers(min_value=0, max_value=10_000)),
    )
    @settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_absent_timestamp_is_always_stale(self, make_plugin, strategy, threshold):
        plugin = make_plugin(
            refresh_strategy=strategy,
            staleness_threshold_minutes=threshold,
            cached_payload_updated_at=None,
        )
        assert is_stale(plugin, now=NOW) is True

    @given(
        threshold=st.integers(min_value=1, max_value=10_000),
        age_minutes=st.integers(min_value=0, max_value=20_000),
    )
    @settings(max_examples=100, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_polling_stale_iff_threshold_elapsed(self, make_plugin, threshold, age_minutes):
        plugin = make_plugin(
            staleness_threshold_minutes=threshold,
            cached_payload_updated_at=NOW - timedelta(minutes=age_minutes),
        )
        assert is_stale(plugin, now=NOW) is (age_minutes >= threshold)

"""
Services package for Inkboard.

Freshness evaluation, response validation, polling and cache updates.
"""

from .data_fetcher import PluginDataFetcher, close_shared_client, parse_polling_headers
from .data_store import DatabasePluginDataStore, InMemoryPluginDataStore, PluginDataStore
from .freshness import is_stale
from .refresh_service import PluginRefreshService
from .response_validation import validate_response_data

__all__ = [
    "DatabasePluginDataStore",
    "InMemoryPluginDataStore",
    "PluginDataFetcher",
    "PluginDataStore",
    "PluginRefreshService",
    "close_shared_client",
    "is_stale",
    "parse_polling_headers",
    "validate_response_data",
]

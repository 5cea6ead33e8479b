"""Data-shape filters: JSON (de)serialization and collection lookups."""

from __future__ import annotations

import json
import random
from collections.abc import Iterable, Mapping
from typing import Any


def _get(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return None


def to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def parse_json(value: Any) -> Any:
    """Decode a JSON string; non-string input passes through untouched."""
    if not isinstance(value, (str, bytes)):
        return value
    return json.loads(value)


def find_by(items: Iterable[Any] | None, key: str, value: Any, fallback: Any = None) -> Any:
    """First mapping in ``items`` whose ``key`` equals ``value``."""
    for item in items or []:
        if _get(item, key) == value:
            return item
    return fallback


def group_by(items: Iterable[Any] | None, key: str) -> dict[Any, list[Any]]:
    """Group mappings by ``key``, keeping first-seen group order."""
    groups: dict[Any, list[Any]] = {}
    for item in items or []:
        group = _get(item, key)
        if isinstance(group, (list, dict)):
            group = to_json(group)
        groups.setdefault(group, []).append(item)
    return groups


def where(items: Iterable[Any] | None, key: str, value: Any = None) -> list[Any]:
    """Mappings whose ``key`` equals ``value``, or is truthy when no value is given."""
    if value is None:
        return [item for item in items or [] if _get(item, key)]
    return [item for item in items or [] if _get(item, key) == value]


def sample(items: Any) -> Any:
    if not items:
        return None
    if isinstance(items, Mapping):
        items = list(items.values())
    return random.choice(list(items))


FILTERS = {
    "json": to_json,
    "parse_json": parse_json,
    "find_by": find_by,
    "group_by": group_by,
    "where": where,
    "sample": sample,
}

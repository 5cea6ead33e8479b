"""Uniqueness helpers.

``append_random`` gives repeated template fragments distinct DOM ids when
the same plugin renders several times on one screen.
"""

import json
import secrets
from collections.abc import Iterable
from typing import Any


def append_random(value: Any, length: int = 4) -> str:
    return f"{value}{secrets.token_hex(max(1, int(length)))[: int(length)]}"


def unique(items: Iterable[Any] | None) -> list[Any]:
    """Drop duplicates, keeping first occurrences; works for unhashable items."""
    seen: set[str] = set()
    out: list[Any] = []
    for item in items or []:
        marker = json.dumps(item, sort_keys=True, default=str)
        if marker in seen:
            continue
        seen.add(marker)
        out.append(item)
    return out


FILTERS = {
    "append_random": append_random,
    "unique": unique,
}

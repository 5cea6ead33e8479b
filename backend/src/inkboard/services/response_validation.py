"""Semantic validation of polled JSON payloads.

Upstreams regularly answer ``200 OK`` with a body that carries no usable
data: error objects, empty containers, or a CORS relay envelope wrapping a
failed upstream call. Checks run in a fixed order and the first match wins;
each failure maps to its own error kind so users see which pattern tripped.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from ..core.exceptions import (
    EmptyResponseError,
    MissingExpectedFieldsError,
    ProxyContentsInvalidJsonError,
    ProxyHttpError,
    UnexpectedShapeError,
    UpstreamErrorFieldError,
)
from ..core.logging import get_logger
from ..core.result import Result

logger = get_logger(__name__)

# Fields of the known direct schema (comic feed: image URL + title)
EXPECTED_FIELDS = ["img", "title"]


def _has(value: Mapping[str, Any], key: str) -> bool:
    """Key present with a non-null value."""
    return value.get(key) is not None


def _has_all(value: Any, keys: list[str]) -> bool:
    return isinstance(value, Mapping) and all(_has(value, k) for k in keys)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-JSON constant {token!r}")


def decode_json(text: str | bytes) -> Any:
    """Strict JSON decode.

    ``NaN``/``Infinity`` literals and nesting deep enough to exhaust the
    recursion limit are rejected with ``ValueError``.
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except RecursionError as e:
        raise ValueError("JSON nesting too deep") from e


def is_proxy_envelope(value: Any) -> bool:
    """``{"status": {"http_code": ...}, "contents": ...}`` as produced by fetch-through relays."""
    if not isinstance(value, Mapping):
        return False
    status = value.get("status")
    return isinstance(status, Mapping) and "http_code" in status and _has(value, "contents")


def is_blank(value: Any) -> bool:
    """None, empty string or empty container; numeric zero and False are data."""
    if value is None:
        return True
    if isinstance(value, (bool, int, float)):
        return False
    if isinstance(value, (str, list, tuple, Mapping)):
        return len(value) == 0
    return False


def _validate_proxy_envelope(value: Mapping[str, Any]) -> Result | None:
    http_code = value["status"]["http_code"]
    if not (isinstance(http_code, int) and not isinstance(http_code, bool) and http_code == 200):
        return Result.err(ProxyHttpError(http_code))

    contents = value["contents"]
    if isinstance(contents, str):
        try:
            decoded = decode_json(contents)
        except ValueError:
            decoded = None
        if decoded is None:
            return Result.err(ProxyContentsInvalidJsonError())
        if not _has_all(decoded, EXPECTED_FIELDS):
            return Result.err(MissingExpectedFieldsError(EXPECTED_FIELDS))
    return None


def _validate_structure(value: Any) -> Result | None:
    """Structural checks for dict/list payloads. Returns a terminal result or None to fall through."""
    if is_proxy_envelope(value):
        return _validate_proxy_envelope(value)

    if _has_all(value, EXPECTED_FIELDS):
        return Result.ok()

    if isinstance(value, Mapping) and (_has(value, "error") or _has(value, "message")):
        upstream = value.get("error")
        if upstream is None:
            upstream = value.get("message")
        return Result.err(UpstreamErrorFieldError(upstream))

    if len(value) == 0 or (isinstance(value, list) and len(value) == 1 and isinstance(value[0], str)):
        return Result.err(UnexpectedShapeError())

    return None


def validate_response_data(value: Any) -> Result:
    """Classify a decoded payload as usable data or a specific validation failure."""
    if isinstance(value, (Mapping, list)):
        outcome = _validate_structure(value)
        if outcome is not None:
            if outcome.is_error:
                logger.info(
                    "Response payload rejected",
                    extra={"error_code": outcome.error.error_code, "reason": outcome.error.message},
                )
            return outcome

    if is_blank(value):
        return Result.err(EmptyResponseError())

    return Result.ok()

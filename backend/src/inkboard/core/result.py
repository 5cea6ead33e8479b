"""Explicit outcome type for the refresh pipeline.

Validation and fetch failures are returned, not raised, so callers decide
how to surface them. ``raise_for_error()`` bridges to exception-style callers.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from .exceptions import InkboardException


class Result(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    status: Literal["success", "skipped", "error"]
    error: InkboardException | None = None
    reason: str | None = None

    @classmethod
    def ok(cls) -> Result:
        return cls(status="success")

    @classmethod
    def skipped(cls, reason: str = "") -> Result:
        return cls(status="skipped", reason=reason or None)

    @classmethod
    def err(cls, error: InkboardException) -> Result:
        return cls(status="error", error=error)

    @property
    def is_ok(self) -> bool:
        return self.status != "error"

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"status": self.status}
        if self.reason:
            out["reason"] = self.reason
        if self.error is not None:
            out["error"] = self.error.to_dict()
        return out

"""
Plugin schemas for Inkboard.

Validation for plugin definitions handed over by the CRUD layer, plus a
read-only view of a plugin's cache state.
"""

from datetime import datetime
from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..models.plugin import Plugin, PollingMethod, RefreshStrategy, TemplateLanguage


class PluginCreate(BaseModel):
    """Schema for creating plugins."""

    name: str = Field(..., min_length=1, max_length=255)
    refresh_strategy: RefreshStrategy = RefreshStrategy.POLLING
    staleness_threshold_minutes: int = Field(60, ge=1)
    polling_endpoint: Optional[str] = None
    polling_method: PollingMethod = PollingMethod.GET
    polling_headers: Optional[str] = Field(None, max_length=255)
    polling_body: Optional[str] = None
    render_template: Optional[str] = None
    render_template_language: TemplateLanguage = TemplateLanguage.JINJA
    render_view_reference: Optional[str] = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Plugin name cannot be empty")
        return v.strip()

    @field_validator("polling_method", mode="before")
    @classmethod
    def normalize_method(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator("polling_endpoint")
    @classmethod
    def validate_endpoint(cls, v):
        if v is None or not v.strip():
            return None
        parsed = urlparse(v.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Polling endpoint must be an absolute http(s) URL")
        return v.strip()

    @model_validator(mode="after")
    def require_endpoint_for_polling(self):
        if self.refresh_strategy == RefreshStrategy.POLLING and not self.polling_endpoint:
            raise ValueError("Polling endpoint is required when refresh strategy is 'polling'")
        return self

    def to_model(self) -> Plugin:
        data = self.model_dump()
        for key in ("refresh_strategy", "polling_method", "render_template_language"):
            data[key] = data[key].value
        return Plugin(**data)


class PluginCacheState(BaseModel):
    """Snapshot of a plugin's cached payload."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    uuid: str
    refresh_strategy: str
    cached_payload: Any = None
    cached_payload_updated_at: Optional[datetime] = None

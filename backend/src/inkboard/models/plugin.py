"""Plugin (display recipe) persistence.

A plugin couples a data source (polled endpoint, webhook deliveries, or static
data) with render markup. The cached payload and its timestamp are only ever
written together by a data store update.
"""

from __future__ import annotations

from enum import Enum
from uuid import uuid4

from sqlalchemy import JSON, Column, Integer, String, Text
from sqlalchemy.dialects.postgresql import TIMESTAMP

from .base import BaseModel


class RefreshStrategy(str, Enum):
    POLLING = "polling"
    WEBHOOK = "webhook"
    STATIC = "static"


class PollingMethod(str, Enum):
    GET = "get"
    POST = "post"


class TemplateLanguage(str, Enum):
    """Markup dialects a plugin template may be written in.

    ``jinja`` runs in a sandbox with the helper filters registered; ``html``
    is plain embedded-HTML templating without helpers.
    """

    JINJA = "jinja"
    HTML = "html"


class Plugin(BaseModel):
    __tablename__ = "plugins"

    uuid = Column(String(36), nullable=False, unique=True, index=True, default=lambda: str(uuid4()))
    name = Column(String(255), nullable=False)

    # Data source
    refresh_strategy = Column(String(16), nullable=False, default=RefreshStrategy.POLLING.value)
    staleness_threshold_minutes = Column(Integer, nullable=True, default=60)
    polling_endpoint = Column(Text, nullable=True)
    polling_method = Column(String(8), nullable=False, default=PollingMethod.GET.value)
    polling_headers = Column(Text, nullable=True)
    polling_body = Column(Text, nullable=True)

    # Cache
    cached_payload = Column(JSON, nullable=True)
    cached_payload_updated_at = Column(TIMESTAMP(timezone=True), nullable=True)

    # Rendering
    render_template = Column(Text, nullable=True)
    render_template_language = Column(String(16), nullable=True, default=TemplateLanguage.JINJA.value)
    render_view_reference = Column(String(255), nullable=True)

    def __init__(self, **kwargs) -> None:
        # Column defaults only fire on flush; plugins are often used unsaved
        kwargs.setdefault("uuid", str(uuid4()))
        kwargs.setdefault("refresh_strategy", RefreshStrategy.POLLING.value)
        kwargs.setdefault("polling_method", PollingMethod.GET.value)
        kwargs.setdefault("render_template_language", TemplateLanguage.JINJA.value)
        super().__init__(**kwargs)

    @property
    def strategy(self) -> RefreshStrategy | None:
        try:
            return RefreshStrategy(str(self.refresh_strategy).lower())
        except ValueError:
            return None

    @property
    def method(self) -> PollingMethod:
        if str(self.polling_method or "").lower() == PollingMethod.POST.value:
            return PollingMethod.POST
        return PollingMethod.GET

    @property
    def template_language(self) -> TemplateLanguage:
        if str(self.render_template_language or "").lower() == TemplateLanguage.JINJA.value:
            return TemplateLanguage.JINJA
        return TemplateLanguage.HTML

    def __repr__(self) -> str:
        return f"<Plugin(id={self.id}, name={self.name}, strategy={self.refresh_strategy})>"

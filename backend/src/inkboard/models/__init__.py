"""
Database models for Inkboard.

This package contains SQLAlchemy models for all database tables
used by the Inkboard application.
"""

from .base import Base
from .plugin import Plugin, PollingMethod, RefreshStrategy, TemplateLanguage

__all__ = ["Base", "Plugin", "PollingMethod", "RefreshStrategy", "TemplateLanguage"]

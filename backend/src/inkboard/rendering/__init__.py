"""
Rendering package for Inkboard.

Turns a plugin's cached payload into display markup.
"""

from .renderer import (
    PLACEHOLDER_MARKUP,
    HtmlTemplateStrategy,
    PluginRenderer,
    SandboxedTemplateStrategy,
    TemplateStrategy,
)

__all__ = [
    "PLACEHOLDER_MARKUP",
    "HtmlTemplateStrategy",
    "PluginRenderer",
    "SandboxedTemplateStrategy",
    "TemplateStrategy",
]

"""Template renderer for plugin markup.

A plugin renders from its inline template (``jinja`` or ``html`` dialect),
from a view file referenced by name, or, when neither is set, to a fixed
placeholder. Every render builds its own jinja2 environment; no environment
or filter registry is shared between renders.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Protocol

from jinja2 import Environment, FileSystemLoader, PackageLoader
from jinja2.sandbox import SandboxedEnvironment
from markupsafe import Markup

from ..core.config import Settings, get_settings_instance
from ..core.exceptions import TemplateExecutionError
from ..core.logging import get_logger
from ..models.plugin import Plugin, TemplateLanguage
from .filters import register_filters

logger = get_logger(__name__)

PLACEHOLDER_MARKUP = "No render markup yet defined for this plugin."
LAYOUT_TEMPLATE = "layouts/single.html"
VIEW_SUFFIX = ".html"


class TemplateStrategy(Protocol):
    """Renders template source against the ``size``/``data`` bindings."""

    def render(self, source: str, context: dict[str, Any]) -> str: ...


class SandboxedTemplateStrategy:
    """``jinja`` dialect: sandboxed execution with the helper filters."""

    def build_environment(self) -> SandboxedEnvironment:
        env = SandboxedEnvironment(autoescape=False)
        return register_filters(env)

    def render(self, source: str, context: dict[str, Any]) -> str:
        return self.build_environment().from_string(source).render(**context)


class HtmlTemplateStrategy:
    """``html`` dialect: sandboxed autoescaping templating, no helper filters."""

    def build_environment(self) -> SandboxedEnvironment:
        return SandboxedEnvironment(autoescape=True)

    def render(self, source: str, context: dict[str, Any]) -> str:
        return self.build_environment().from_string(source).render(**context)


STRATEGIES: dict[TemplateLanguage, TemplateStrategy] = {
    TemplateLanguage.JINJA: SandboxedTemplateStrategy(),
    TemplateLanguage.HTML: HtmlTemplateStrategy(),
}


def view_template_name(reference: str) -> str:
    """Map a dotted view reference to a template path.

    ``recipes.weather`` -> ``recipes/weather.html``. References that already
    carry the ``.html`` suffix are treated as paths.
    """
    reference = reference.strip()
    if reference.endswith(VIEW_SUFFIX):
        return reference
    return reference.replace(".", "/") + VIEW_SUFFIX


class PluginRenderer:
    """Produce display markup for a plugin from its cached payload."""

    def __init__(self, settings: Settings | None = None, views_dir: str | Path | None = None) -> None:
        self.settings = settings or get_settings_instance()
        self.views_dir = Path(views_dir) if views_dir is not None else Path(self.settings.views_dir)

    def _render_view(self, reference: str, context: dict[str, Any]) -> str:
        env = SandboxedEnvironment(loader=FileSystemLoader(str(self.views_dir)), autoescape=True)
        register_filters(env)
        return env.get_template(view_template_name(reference)).render(**context)

    def _wrap(self, fragment: str) -> str:
        env = Environment(loader=PackageLoader("inkboard", "templates"), autoescape=True)
        return env.get_template(LAYOUT_TEMPLATE).render(slot=Markup(fragment))

    def render_fragment(self, plugin: Plugin, size: str = "full") -> str | None:
        """Render the plugin's markup without the layout.

        Returns None when the plugin has neither an inline template nor a view
        reference.
        """
        # Filters see a private copy; the plugin's cached payload is never touched
        context = {"size": size, "data": copy.deepcopy(plugin.cached_payload)}

        try:
            if plugin.render_template:
                strategy = STRATEGIES[plugin.template_language]
                return strategy.render(plugin.render_template, context)
            if plugin.render_view_reference:
                return self._render_view(plugin.render_view_reference, context)
        except Exception as e:
            logger.warning(
                "Plugin template failed to render",
                extra={"plugin_id": plugin.id, "plugin_uuid": plugin.uuid, "error": str(e)},
            )
            raise TemplateExecutionError(
                f"{e.__class__.__name__}: {e}",
                details={"plugin_uuid": plugin.uuid, "language": plugin.template_language.value},
            ) from e
        return None

    def render(self, plugin: Plugin, size: str = "full", standalone: bool = True) -> str:
        """Render ``plugin`` for the ``size`` variant.

        With ``standalone`` the fragment is embedded in the page layout;
        otherwise the bare fragment is returned. Plugins with nothing to render
        yield ``PLACEHOLDER_MARKUP`` unwrapped.
        """
        fragment = self.render_fragment(plugin, size)
        if fragment is None:
            return PLACEHOLDER_MARKUP
        if not standalone:
            return fragment
        try:
            return self._wrap(fragment)
        except Exception as e:
            raise TemplateExecutionError(f"layout failed: {e}") from e

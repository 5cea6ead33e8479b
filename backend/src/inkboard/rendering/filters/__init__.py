"""Helper filters available to sandboxed plugin templates."""

from jinja2 import Environment

from . import data, localization, numbers, string_markup, uniqueness

HELPER_MODULES = (numbers, data, string_markup, uniqueness, localization)


def register_filters(env: Environment) -> Environment:
    """Install every helper module's filters into ``env``."""
    for module in HELPER_MODULES:
        env.filters.update(module.FILTERS)
    return env


__all__ = ["HELPER_MODULES", "register_filters"]

"""Inkboard: data-freshness, fetch and render engine for display recipes."""

__version__ = "0.1.0"

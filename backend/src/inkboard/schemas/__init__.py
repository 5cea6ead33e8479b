"""
Pydantic schemas for Inkboard.
"""

from .plugin import PluginCacheState, PluginCreate

__all__ = ["PluginCacheState", "PluginCreate"]

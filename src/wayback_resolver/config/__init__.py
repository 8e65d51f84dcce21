"""Configuration package for wayback-resolver.

Re-exports the settings symbols so that callers can write::

    from wayback_resolver.config import get_settings
"""

from __future__ import annotations

from wayback_resolver.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]

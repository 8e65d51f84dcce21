"""Resolve URLs to durable Internet Archive Wayback Machine snapshots.

Usage::

    from wayback_resolver import resolve_all
    from wayback_resolver.core.logging_config import configure_logging

    configure_logging()  # level from WAYBACK_LOG_LEVEL
    batch = resolve_all(["https://go.dev"], attempts=3)
    for resolved in batch.results:
        print(resolved.input_url, resolved.archive_url)
    for error in batch.errors:
        print(error.url, error.stage, error.cause)
"""

from __future__ import annotations

from wayback_resolver.core.exceptions import ResolutionError, WaybackResolverError
from wayback_resolver.wayback.resolver import (
    WaybackResolver,
    check_history,
    resolve_all,
    resolve_one,
)
from wayback_resolver.wayback.schemas import (
    BatchResult,
    ResolutionOutcome,
    ResolvedURL,
    Sparkline,
)

__all__ = [
    "BatchResult",
    "ResolutionError",
    "ResolutionOutcome",
    "ResolvedURL",
    "Sparkline",
    "WaybackResolver",
    "WaybackResolverError",
    "check_history",
    "resolve_all",
    "resolve_one",
]

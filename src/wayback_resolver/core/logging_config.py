"""Structured logging configuration using structlog.

The library never configures logging on import.  A program embedding the
resolver calls ``configure_logging()`` once at startup; without an argument
it uses ``WAYBACK_LOG_LEVEL`` from :class:`~wayback_resolver.config.settings.Settings`.

Stdlib records (``logging.getLogger(__name__)``, used by the client and the
retry policy) and structlog records (``structlog.get_logger``, used by the
resolver for bound ``url``/``stage`` context) share one handler and renderer.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import EventDict, WrappedLogger

from wayback_resolver.config.settings import get_settings

_SECRET_SUBSTRINGS: frozenset[str] = frozenset({
    "cookie",
    "password",
    "secret",
    "token",
    "authorization",
    "session",
})
"""Lower-cased substrings that identify log event-dict keys whose values
must be redacted before the record reaches any renderer."""

_REDACTED = "[REDACTED]"


def _is_secret(key: object) -> bool:
    key_lower = str(key).lower()
    return any(secret in key_lower for secret in _SECRET_SUBSTRINGS)


def _redact_secrets(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Replace values of secret-bearing keys with ``"[REDACTED]"``.

    Scans top-level keys and nested ``dict`` values one level deep (for
    instance ``headers={"Cookie": ...}``).  Nested dicts are copied before
    redaction so the caller's objects are left untouched.
    """
    for key in list(event_dict.keys()):
        if _is_secret(key):
            event_dict[key] = _REDACTED
            continue
        val = event_dict[key]
        if isinstance(val, dict) and any(_is_secret(k) for k in val):
            event_dict[key] = {k: _REDACTED if _is_secret(k) else v for k, v in val.items()}
    return event_dict


def configure_logging(log_level: str | None = None) -> None:
    """Route stdlib and structlog records through one stdout handler.

    Outputs newline-delimited JSON, or structlog's ``ConsoleRenderer`` when
    the level is ``DEBUG``.  Every record carries ``timestamp``, ``level``,
    ``logger`` and ``event``.  httpx and httpcore are held at WARNING outside
    DEBUG.  Safe to call more than once; the root handler is replaced.

    Args:
        log_level: ``"DEBUG"``, ``"INFO"``, ``"WARNING"``, ``"ERROR"`` or
            ``"CRITICAL"``, case-insensitive.  Defaults to
            ``get_settings().log_level``.
    """
    level_upper = (log_level or get_settings().log_level).upper()
    numeric_level = getattr(logging, level_upper, logging.INFO)
    is_development = level_upper == "DEBUG"

    shared_processors: list[structlog.types.Processor] = [
        _redact_secrets,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    final_renderer: structlog.types.Processor
    if is_development:
        final_renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        final_renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            final_renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    noisy_level = logging.NOTSET if is_development else logging.WARNING
    for noisy_logger in ("httpx", "httpcore"):
        logging.getLogger(noisy_logger).setLevel(noisy_level)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

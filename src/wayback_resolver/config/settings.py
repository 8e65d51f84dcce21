"""Resolver settings loaded from environment variables.

Uses Pydantic Settings v2 for validated, type-safe configuration.  Every
variable is prefixed with ``WAYBACK_`` so the resolver can live alongside
other services in one environment.

Usage::

    from wayback_resolver.config.settings import get_settings

    settings = get_settings()
    api_base = settings.api_base
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Resolver configuration backed by environment variables and an optional .env file.

    All fields have defaults that point at the public Wayback Machine.  Explicit
    arguments passed to :func:`~wayback_resolver.resolve_all` and friends take
    precedence over these values.
    """

    model_config = SettingsConfigDict(
        env_prefix="WAYBACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Upstream endpoints
    # ------------------------------------------------------------------

    api_base: str = "https://wwwb-api.archive.org"
    """Base URL of the availability, Save Page Now and sparkline APIs."""

    archive_root: str = "https://web.archive.org/web"
    """Root that timestamped archive URLs are built from::

        {archive_root}/{timestamp}/{original_url}
    """

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    request_timeout: float = 30.0
    """Per-request timeout in seconds."""

    user_agent: str = "wayback-resolver/0.1 (+https://web.archive.org)"
    """User-Agent header sent with every request."""

    save_cookie: str = ""
    """Session cookie used to authenticate Save Page Now requests.

    Copy it from a logged-in archive.org browser session.  Never commit it.
    """

    # ------------------------------------------------------------------
    # Retry timing
    # ------------------------------------------------------------------

    retry_attempts: int = 3
    """Default number of attempts per retried stage."""

    availability_retry_delay: float = 1.0
    """Fixed delay (seconds) between availability-check attempts."""

    poll_base_delay: float = 1.0
    """Base delay (seconds) for exponential backoff between job-status polls."""

    rate_limit_delay: float = 1.0
    """Delay (seconds) suggested after an HTTP 429 from the availability API."""

    pending_delay: float = 3.0
    """Delay (seconds) suggested while a save job is still pending."""

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    log_level: str = "INFO"
    """Log verbosity passed to :func:`~wayback_resolver.core.logging_config.configure_logging`."""


@lru_cache
def get_settings() -> Settings:
    """Return the cached :class:`Settings` instance.

    Uses ``functools.lru_cache`` so that Pydantic Settings reads the environment
    only once per process.  Tests that patch environment variables must call
    ``get_settings.cache_clear()`` afterwards.
    """
    return Settings()

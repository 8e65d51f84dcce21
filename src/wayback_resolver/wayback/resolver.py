"""Resolve URLs to Wayback Machine snapshots, archiving them on demand.

For every input URL the resolver:

1. asks the availability API for the closest snapshot (retried with a fixed
   delay; HTTP 429 suggests ``rate_limit_delay``);
2. returns that snapshot if one exists, whatever ``archive_if_missing`` says;
3. otherwise, when ``archive_if_missing`` is set, submits a Save Page Now
   request (not retried) and
4. polls the job (retried with exponential backoff; ``pending`` suggests
   ``pending_delay``) until it succeeds or fails;
5. builds ``{archive_root}/{timestamp}/{url}`` from the successful job without
   querying the upstream again.

URLs are resolved one after another.  A failing URL is recorded as a
:class:`~wayback_resolver.core.exceptions.ResolutionError` and the batch
carries on.
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable
from types import TracebackType

import httpx
import structlog

from wayback_resolver.config.settings import Settings, get_settings
from wayback_resolver.core.exceptions import (
    ProtocolViolationError,
    ResolutionError,
    WaybackResolverError,
)
from wayback_resolver.core.retry import DelayStrategy, execute
from wayback_resolver.wayback.client import WaybackClient
from wayback_resolver.wayback.schemas import (
    AvailabilityResult,
    BatchResult,
    ResolutionOutcome,
    ResolvedURL,
    SaveJob,
    Sparkline,
)

logger = structlog.get_logger(__name__)


def _check_attempts(attempts: int) -> None:
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")


class ResolutionStage(str, enum.Enum):
    AVAILABILITY = "availability"
    SUBMIT = "submit"
    POLL = "poll"
    HISTORY = "history"


class WaybackResolver:
    """Orchestrates availability checks, save requests and job polling.

    One resolver may be reused for many calls; it keeps no per-URL state.

    Args:
        settings: Resolver settings; defaults to :func:`get_settings`.
        http_client: Optional shared :class:`httpx.Client`.
        sleep: Blocking sleep used between retries; injectable for tests.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = WaybackClient(settings=self._settings, http_client=http_client)
        self._sleep_kwargs = {"sleep": sleep} if sleep is not None else {}

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> WaybackResolver:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def check_availability(self, url: str, attempts: int) -> AvailabilityResult:
        """Return the closest snapshot of *url*, retrying transient failures."""
        try:
            return execute(
                lambda: self._client.availability_attempt(url),
                max_attempts=attempts,
                base_delay=self._settings.availability_retry_delay,
                strategy=DelayStrategy.FIXED,
                **self._sleep_kwargs,
            )
        except WaybackResolverError as exc:
            raise ResolutionError(url, ResolutionStage.AVAILABILITY.value, exc) from exc

    def latest_url(self, url: str, attempts: int) -> str:
        """Return the closest snapshot URL of *url*, or ``""`` if none exists."""
        return self.check_availability(url, attempts).snapshot_url

    def archive(self, url: str, attempts: int, cookie: str) -> str:
        """Capture *url* now and return its timestamped archive URL.

        Skips the availability check; use :meth:`resolve_one` to archive only
        when no snapshot exists.

        Raises:
            ResolutionError: With stage ``submit`` or ``poll``.
        """
        try:
            submission = self._client.submit_save(url, cookie)
        except WaybackResolverError as exc:
            raise ResolutionError(url, ResolutionStage.SUBMIT.value, exc) from exc

        if submission.redirect_url is not None:
            logger.info("archive redirect", url=url, archive_url=submission.redirect_url)
            return submission.redirect_url

        job = submission.job
        if job is None:
            violation = ProtocolViolationError("archive.org reply carried neither a job nor a redirect")
            raise ResolutionError(url, ResolutionStage.SUBMIT.value, violation)
        try:
            return self._await_job(job, attempts)
        except WaybackResolverError as exc:
            raise ResolutionError(url, ResolutionStage.POLL.value, exc) from exc

    def _await_job(self, job: SaveJob, attempts: int) -> str:
        status = execute(
            lambda: self._client.job_status_attempt(job),
            max_attempts=attempts,
            base_delay=self._settings.poll_base_delay,
            strategy=DelayStrategy.EXPONENTIAL,
            **self._sleep_kwargs,
        )
        if not status.timestamp:
            raise ProtocolViolationError(
                f"archive.org reported success for job {job.job_id} without a timestamp"
            )
        archive_url = f"{self._settings.archive_root.rstrip('/')}/{status.timestamp}/{job.original_url}"
        logger.info("archived", url=job.original_url, job_id=job.job_id, archive_url=archive_url)
        return archive_url

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def resolve_one(
        self,
        url: str,
        attempts: int | None = None,
        *,
        archive_if_missing: bool = False,
        cookie: str | None = None,
    ) -> ResolvedURL:
        """Resolve one URL to an archive URL.

        Args:
            url: URL to resolve.
            attempts: Attempts per retried stage; defaults to
                ``settings.retry_attempts``.
            archive_if_missing: Capture the page when no snapshot exists.
                Has no effect when a snapshot exists.
            cookie: archive.org session cookie for captures; defaults to
                ``settings.save_cookie``.

        Returns:
            A :class:`ResolvedURL` with outcome ``FOUND``, ``ARCHIVED`` or
            ``NOT_FOUND`` (empty ``archive_url``).

        Raises:
            ValueError: If *attempts* is below 1.
            ResolutionError: If any stage failed.
        """
        attempts = attempts if attempts is not None else self._settings.retry_attempts
        _check_attempts(attempts)
        cookie = cookie if cookie is not None else self._settings.save_cookie
        log = logger.bind(url=url)

        availability = self.check_availability(url, attempts)
        if availability.found:
            log.debug("snapshot found", archive_url=availability.snapshot_url)
            return ResolvedURL(url, availability.snapshot_url, ResolutionOutcome.FOUND)

        if not archive_if_missing:
            log.debug("no snapshot, archival not requested")
            return ResolvedURL(url, "", ResolutionOutcome.NOT_FOUND)

        log.info("no snapshot, archiving")
        return ResolvedURL(url, self.archive(url, attempts, cookie), ResolutionOutcome.ARCHIVED)

    def resolve_all(
        self,
        urls: Iterable[str],
        attempts: int | None = None,
        archive_if_missing: bool = False,
        cookie: str | None = None,
    ) -> BatchResult:
        """Resolve every URL in order, collecting results and errors separately.

        Returns:
            A :class:`BatchResult`; each URL contributes exactly one entry to
            either ``results`` or ``errors``.

        Raises:
            ValueError: If *attempts* is below 1, before any URL is tried.
        """
        if attempts is None:
            attempts = self._settings.retry_attempts
        _check_attempts(attempts)

        batch = BatchResult()
        for url in urls:
            try:
                resolved = self.resolve_one(
                    url,
                    attempts,
                    archive_if_missing=archive_if_missing,
                    cookie=cookie,
                )
            except ResolutionError as exc:
                logger.warning("resolution failed", url=url, stage=exc.stage, error=str(exc.cause))
                batch.errors.append(exc)
                continue
            batch.results.append(resolved)

        logger.info(
            "batch resolved",
            resolved=len(batch.results),
            failed=len(batch.errors),
        )
        return batch

    def check_history(self, url: str) -> Sparkline:
        """Return the capture history of *url*.

        Raises:
            ResolutionError: With stage ``history``.
        """
        try:
            return self._client.fetch_sparkline(url)
        except WaybackResolverError as exc:
            raise ResolutionError(url, ResolutionStage.HISTORY.value, exc) from exc


# ---------------------------------------------------------------------------
# Module-level convenience functions
# ---------------------------------------------------------------------------


def resolve_one(
    url: str,
    attempts: int | None = None,
    *,
    archive_if_missing: bool = False,
    cookie: str | None = None,
    client: httpx.Client | None = None,
) -> ResolvedURL:
    """Resolve one URL with a short-lived :class:`WaybackResolver`."""
    with WaybackResolver(http_client=client) as resolver:
        return resolver.resolve_one(
            url, attempts, archive_if_missing=archive_if_missing, cookie=cookie
        )


def resolve_all(
    urls: Iterable[str],
    attempts: int | None = None,
    archive_if_missing: bool = False,
    cookie: str | None = None,
    *,
    client: httpx.Client | None = None,
) -> BatchResult:
    """Resolve a batch of URLs with a short-lived :class:`WaybackResolver`."""
    with WaybackResolver(http_client=client) as resolver:
        return resolver.resolve_all(urls, attempts, archive_if_missing, cookie)


def check_history(url: str, *, client: httpx.Client | None = None) -> Sparkline:
    """Fetch the capture history of *url* with a short-lived :class:`WaybackResolver`."""
    with WaybackResolver(http_client=client) as resolver:
        return resolver.check_history(url)

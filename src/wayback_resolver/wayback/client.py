"""Thin client for the four Wayback Machine endpoints the resolver uses.

Each endpoint has a ``fetch_*`` / ``submit_*`` method that performs one HTTP
exchange and raises on failure.  The two endpoints the resolver retries also
have an ``*_attempt`` method that runs the exchange once and classifies the
result as an :data:`~wayback_resolver.core.retry.Outcome`, ready to be handed
to :func:`~wayback_resolver.core.retry.execute`:

=====================  ====================================  ==================
Condition              Availability                          Job status
=====================  ====================================  ==================
transport error        Retriable                             Retriable
HTTP 429               Retriable (``rate_limit_delay``)      Retriable
malformed body         Terminal                              Terminal
invalid request        Terminal                              Terminal
job ``pending``        n/a                                   Retriable (``pending_delay``)
job ``success``        n/a                                   Ok
any other job status   n/a                                   Terminal
=====================  ====================================  ==================
"""

from __future__ import annotations

import logging
from types import TracebackType
from urllib.parse import quote

import httpx

from wayback_resolver.config.settings import Settings, get_settings
from wayback_resolver.core.exceptions import (
    InvalidRequestError,
    JobFailedError,
    JobPendingError,
    MalformedResponseError,
    ProtocolViolationError,
    RateLimitedError,
    ServiceDeclinedError,
    TransportError,
)
from wayback_resolver.core.retry import Ok, Outcome, Retriable, Terminal
from wayback_resolver.wayback._decoder import (
    decode_availability,
    decode_save,
    decode_sparkline,
    decode_status,
)
from wayback_resolver.wayback._transport import RawResponse, send
from wayback_resolver.wayback.config import (
    HTTP_RATE_LIMITED,
    SAVE_CAPTURE_ALL,
    SAVE_DECLINED_STATUSES,
    SAVE_HEADERS,
    SAVE_REDIRECT_STATUSES,
    WB_AVAILABILITY_PATH,
    WB_SAVE_PATH,
    WB_SAVE_STATUS_PATH,
    WB_SPARKLINE_PARAMS,
    WB_SPARKLINE_PATH,
)
from wayback_resolver.wayback.schemas import (
    AvailabilityResult,
    JobState,
    JobStatus,
    SaveJob,
    SaveSubmission,
    Sparkline,
)

logger = logging.getLogger(__name__)


class WaybackClient:
    """Wayback Machine API client.

    Args:
        settings: Resolver settings; defaults to :func:`get_settings`.
        http_client: Optional injected :class:`httpx.Client`.  When omitted
            the client builds its own and closes it in :meth:`close`.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.Client(
            timeout=self._settings.request_timeout,
            headers={"User-Agent": self._settings.user_agent},
        )

    def close(self) -> None:
        if self._owns_http_client:
            self._http.close()

    def __enter__(self) -> WaybackClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _url(self, path: str) -> str:
        return self._settings.api_base.rstrip("/") + path

    def _raise_for_rate_limit(self, raw: RawResponse, retry_after: float | None = None) -> None:
        if raw.status_code == HTTP_RATE_LIMITED:
            raise RateLimitedError("rate limited by wayback api", retry_after=retry_after)

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def fetch_availability(self, url: str) -> AvailabilityResult:
        """Ask the availability API for the closest snapshot of *url*.

        Any status other than 429 is decoded; the API reports absence with a
        200 and an empty ``archived_snapshots`` object.

        Raises:
            TransportError: On network failure.
            RateLimitedError: On HTTP 429.
            MalformedResponseError: If the body is not an availability payload.
        """
        raw = send(self._http, "GET", self._url(WB_AVAILABILITY_PATH), params={"url": url})
        self._raise_for_rate_limit(raw, retry_after=self._settings.rate_limit_delay)
        return decode_availability(raw.body, queried_url=url)

    def availability_attempt(self, url: str) -> Outcome[AvailabilityResult]:
        """Run :meth:`fetch_availability` once and classify the result."""
        try:
            return Ok(self.fetch_availability(url))
        except RateLimitedError as exc:
            return Retriable(exc, suggested_delay=exc.retry_after)
        except TransportError as exc:
            return Retriable(exc)
        except (MalformedResponseError, InvalidRequestError) as exc:
            return Terminal(exc)

    # ------------------------------------------------------------------
    # Save Page Now
    # ------------------------------------------------------------------

    def submit_save(self, url: str, cookie: str) -> SaveSubmission:
        """Ask archive.org to capture *url*.

        Not retried: a save request is not idempotent from the caller's point
        of view, and the job it may have started cannot be recovered.

        Args:
            url: Page to capture.
            cookie: archive.org session cookie.

        Returns:
            A :class:`SaveSubmission` holding either the accepted
            :class:`SaveJob` or, for legacy redirect replies, the archive URL.

        Raises:
            TransportError: On network failure.
            ServiceDeclinedError: On HTTP 520/523.
            ProtocolViolationError: On a redirect without ``Location`` or an
                acknowledgement without ``job_id``.
            MalformedResponseError: If the acknowledgement is not JSON.
            InvalidRequestError: If *cookie* cannot be sent as a header.
        """
        form = {"capture_all": SAVE_CAPTURE_ALL, "url": url}
        raw = send(
            self._http,
            "POST",
            self._url(WB_SAVE_PATH),
            params=form,
            data=form,
            headers={**SAVE_HEADERS, "Cookie": cookie},
        )

        if raw.status_code in SAVE_REDIRECT_STATUSES:
            location = raw.headers.get("location", "")
            if not location:
                raise ProtocolViolationError("archive.org did not reply with a location header")
            return SaveSubmission(redirect_url=location)

        if raw.status_code in SAVE_DECLINED_STATUSES:
            raise ServiceDeclinedError(raw.status_code)

        ack = decode_save(raw.body)
        if not ack.job_id:
            raise ProtocolViolationError("archive.org did not respond with a job_id", body=raw.body)

        logger.info("wayback: save job %s started for %s", ack.job_id, url)
        return SaveSubmission(job=SaveJob(original_url=url, job_id=ack.job_id))

    def fetch_job_status(self, job_id: str) -> JobStatus:
        """Fetch the current status of a save job.

        Raises:
            TransportError: On network failure.
            RateLimitedError: On HTTP 429.
            MalformedResponseError: If the body is not a status payload.
            InvalidRequestError: If the request cannot be built.
        """
        # job_id comes from the upstream; keep it a single path segment.
        path = WB_SAVE_STATUS_PATH.format(job_id=quote(job_id, safe=""))
        raw = send(self._http, "GET", self._url(path))
        self._raise_for_rate_limit(raw)
        status = decode_status(raw.body)
        if not status.job_id:
            # Some error replies omit the id; keep the handle we polled with.
            status = JobStatus(
                job_id=job_id,
                state=status.state,
                raw_status=status.raw_status,
                timestamp=status.timestamp,
                original_url=status.original_url,
            )
        return status

    def job_status_attempt(self, job: SaveJob) -> Outcome[JobStatus]:
        """Poll *job* once and classify the result."""
        try:
            status = self.fetch_job_status(job.job_id)
        except (RateLimitedError, TransportError) as exc:
            return Retriable(exc, suggested_delay=None)
        except (MalformedResponseError, InvalidRequestError) as exc:
            return Terminal(exc)

        if status.state is JobState.PENDING:
            return Retriable(
                JobPendingError(job.job_id),
                suggested_delay=self._settings.pending_delay,
            )
        if status.state is JobState.SUCCESS:
            return Ok(status)
        return Terminal(JobFailedError(job.job_id, status.raw_status))

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def fetch_sparkline(self, url: str) -> Sparkline:
        """Fetch the capture history of *url*.  Unauthenticated.

        Raises:
            TransportError: On network failure.
            RateLimitedError: On HTTP 429.
            MalformedResponseError: If the body is not a sparkline payload.
        """
        raw = send(
            self._http,
            "GET",
            self._url(WB_SPARKLINE_PATH),
            params={**WB_SPARKLINE_PARAMS, "url": url},
        )
        self._raise_for_rate_limit(raw)
        return decode_sparkline(raw.body)

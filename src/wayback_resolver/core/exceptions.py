"""Exception hierarchy for wayback-resolver.

All custom exceptions subclass ``WaybackResolverError``, so callers can catch
the entire hierarchy with a single ``except`` clause when needed.

Hierarchy::

    WaybackResolverError
    ├── TransportError           network-level failure, retriable
    ├── RateLimitedError         (retry_after: float) HTTP 429
    ├── JobPendingError          save job not finished yet
    ├── MalformedResponseError   (body: bytes) undecodable payload
    ├── ServiceDeclinedError     (status_code: int) HTTP 520/523
    ├── ProtocolViolationError   expected field or header absent
    ├── InvalidRequestError      (url: str) request could not be built
    ├── JobFailedError           (status: str) terminal job status
    ├── RetryExhaustedError      (attempts: int, last_error)
    └── ResolutionError          (url: str, stage: str) per-URL failure
"""

from __future__ import annotations

_BODY_PREVIEW_CHARS = 500


def _preview(body: bytes) -> str:
    text = body.decode("utf-8", errors="replace")
    if len(text) > _BODY_PREVIEW_CHARS:
        return text[:_BODY_PREVIEW_CHARS] + "..."
    return text


class WaybackResolverError(Exception):
    """Base class for all wayback-resolver exceptions."""


# ---------------------------------------------------------------------------
# Retriable conditions
# ---------------------------------------------------------------------------


class TransportError(WaybackResolverError):
    """Raised when the HTTP exchange itself fails (DNS, reset, timeout).

    Args:
        message: Human-readable description of the failure.
        url: Request URL that failed.
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class RateLimitedError(WaybackResolverError):
    """Raised when the Wayback Machine answers with HTTP 429.

    Args:
        message: Human-readable description of the rate limit.
        retry_after: Seconds to wait before retrying. ``None`` leaves the
            choice to the retry policy.
    """

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class JobPendingError(WaybackResolverError):
    """Raised while a Save Page Now job is still running."""

    def __init__(self, job_id: str) -> None:
        super().__init__(f"job {job_id} is still pending")
        self.job_id = job_id


# ---------------------------------------------------------------------------
# Terminal conditions
# ---------------------------------------------------------------------------


class MalformedResponseError(WaybackResolverError):
    """Raised when a response body cannot be decoded into the expected shape.

    Args:
        message: Description of the decoding failure.
        body: Raw response body, kept for diagnostics.
    """

    def __init__(self, message: str, body: bytes = b"") -> None:
        super().__init__(f"{message}, body: {_preview(body)}")
        self.body = body


class ServiceDeclinedError(WaybackResolverError):
    """Raised when archive.org explicitly refuses to archive a page (520/523)."""

    def __init__(self, status_code: int) -> None:
        super().__init__(
            f"archive.org declined to archive that page (HTTP {status_code})"
        )
        self.status_code = status_code


class ProtocolViolationError(WaybackResolverError):
    """Raised when a response lacks a field or header the protocol requires.

    Covers a save acknowledgement without ``job_id``, a redirect without a
    ``Location`` header, and a successful job without a ``timestamp``.

    Args:
        message: Description of what was missing.
        body: Raw response body, echoed in the message when present.
    """

    def __init__(self, message: str, body: bytes = b"") -> None:
        if body:
            message = f"{message}: {_preview(body)}"
        super().__init__(message)
        self.body = body


class InvalidRequestError(WaybackResolverError):
    """Raised when a request cannot be built from the values it was given.

    An upstream ``job_id`` that is not a valid path segment or a cookie that
    cannot be encoded as an HTTP header ends here.  Never retried.

    Args:
        message: Description of the invalid value.
        url: Request URL, as far as it could be formed.
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class JobFailedError(WaybackResolverError):
    """Raised when a save job reaches a status other than pending or success.

    Args:
        job_id: Identifier of the failed job.
        status: Literal status string reported by the API.
    """

    def __init__(self, job_id: str, status: str) -> None:
        super().__init__(f"archive.org request had unexpected status: {status}")
        self.job_id = job_id
        self.status = status


class RetryExhaustedError(WaybackResolverError):
    """Raised by :func:`~wayback_resolver.core.retry.execute` when every attempt failed.

    Args:
        attempts: Number of attempts made.
        last_error: The error reported by the final attempt.
    """

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"all {attempts} attempts failed: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


# ---------------------------------------------------------------------------
# Orchestrator boundary
# ---------------------------------------------------------------------------


class ResolutionError(WaybackResolverError):
    """Raised (or collected) when one URL could not be resolved.

    The underlying error is chained as ``__cause__`` and kept on ``cause``.

    Args:
        url: Input URL whose resolution failed.
        stage: Stage that failed (``"availability"``, ``"submit"``,
            ``"poll"`` or ``"history"``).
        cause: The underlying exception.
    """

    def __init__(self, url: str, stage: str, cause: BaseException) -> None:
        super().__init__(f"unable to resolve {url} during {stage}: {cause}")
        self.url = url
        self.stage = stage
        self.cause = cause
        self.__cause__ = cause

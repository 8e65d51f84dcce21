"""Typed results produced by the Wayback client and resolver.

These are plain dataclasses: the wire shapes they are built from live in
:mod:`wayback_resolver.wayback._decoder`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from wayback_resolver.core.exceptions import ResolutionError
from wayback_resolver.wayback.config import (
    JOB_STATUS_ERROR,
    JOB_STATUS_PENDING,
    JOB_STATUS_SUCCESS,
)


@dataclass(frozen=True)
class AvailabilityResult:
    """Closest snapshot reported by the availability API.

    Attributes:
        queried_url: URL that was looked up.
        found: ``True`` when an available snapshot exists.
        snapshot_url: Archive URL of the closest snapshot, ``""`` if not found.
        snapshot_timestamp: 14-digit capture timestamp, ``""`` if not found.
    """

    queried_url: str
    found: bool
    snapshot_url: str = ""
    snapshot_timestamp: str = ""


@dataclass(frozen=True)
class SaveJob:
    """An accepted Save Page Now job.  ``job_id`` is the only polling handle."""

    original_url: str
    job_id: str


@dataclass(frozen=True)
class SaveSubmission:
    """Result of a save request: either a job to poll or a direct archive URL."""

    job: SaveJob | None = None
    redirect_url: str | None = None


class JobState(str, enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"
    OTHER = "other"

    @classmethod
    def from_raw(cls, raw: str) -> JobState:
        return {
            JOB_STATUS_PENDING: cls.PENDING,
            JOB_STATUS_SUCCESS: cls.SUCCESS,
            JOB_STATUS_ERROR: cls.ERROR,
        }.get(raw, cls.OTHER)


@dataclass(frozen=True)
class JobStatus:
    """One observation of a save job.

    Attributes:
        job_id: Job the status belongs to.
        state: Classified status.
        raw_status: Literal ``status`` string from the API.
        timestamp: Capture timestamp; only set once the job succeeded.
        original_url: URL the job is capturing.
    """

    job_id: str
    state: JobState
    raw_status: str
    timestamp: str = ""
    original_url: str = ""


@dataclass(frozen=True)
class Sparkline:
    """Capture history of a URL.

    ``years`` maps a year to twelve monthly capture counts.
    """

    years: dict[str, list[int]] = field(default_factory=dict)
    first_ts: str = ""
    last_ts: str = ""
    status: dict[str, str] = field(default_factory=dict)


class ResolutionOutcome(str, enum.Enum):
    """How a URL was resolved."""

    FOUND = "found"
    """An existing snapshot was returned; nothing was archived."""

    ARCHIVED = "archived"
    """A new capture was requested and completed."""

    NOT_FOUND = "not_found"
    """No snapshot exists and archival was not requested."""


@dataclass(frozen=True)
class ResolvedURL:
    """Resolution result for one input URL.

    ``archive_url`` is empty only when ``outcome`` is
    :attr:`ResolutionOutcome.NOT_FOUND`.
    """

    input_url: str
    archive_url: str
    outcome: ResolutionOutcome

    @property
    def found(self) -> bool:
        return self.outcome is not ResolutionOutcome.NOT_FOUND


@dataclass
class BatchResult:
    """Results and errors of a batch, each in input order.

    The two lists are indexed independently: every input URL contributes one
    entry to exactly one of them.
    """

    results: list[ResolvedURL] = field(default_factory=list)
    errors: list[ResolutionError] = field(default_factory=list)

    @property
    def archive_urls(self) -> list[str]:
        return [r.archive_url for r in self.results]

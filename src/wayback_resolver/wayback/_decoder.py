"""Wire models and decoders for Wayback Machine JSON payloads.

Internal module.  Each ``decode_*`` function is pure: it turns raw body bytes
into a typed result or raises
:class:`~wayback_resolver.core.exceptions.MalformedResponseError` carrying the
body.  Status codes are never inspected here.
"""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wayback_resolver.core.exceptions import MalformedResponseError
from wayback_resolver.wayback.schemas import (
    AvailabilityResult,
    JobState,
    JobStatus,
    Sparkline,
)

# ---------------------------------------------------------------------------
# Wire models
# ---------------------------------------------------------------------------


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ClosestSnapshot(_WireModel):
    status: str = ""
    available: bool = False
    url: str = ""
    timestamp: str = ""


class ArchivedSnapshots(_WireModel):
    closest: ClosestSnapshot | None = None


class AvailabilityResponse(_WireModel):
    url: str = ""
    archived_snapshots: ArchivedSnapshots = Field(default_factory=ArchivedSnapshots)


class SaveResponse(_WireModel):
    url: str = ""
    job_id: str = ""
    message: str = ""


class StatusCounters(_WireModel):
    embeds: int = 0
    outlinks: int = 0


class StatusResponse(_WireModel):
    counters: StatusCounters = Field(default_factory=StatusCounters)
    duration_sec: float = 0.0
    first_archive: bool = False
    http_status: int = 0
    job_id: str = ""
    original_url: str = ""
    outlinks: list[str] | dict[str, str] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)
    status: str
    timestamp: str = ""


class SparklineResponse(_WireModel):
    years: dict[str, list[int]] = Field(default_factory=dict)
    first_ts: str | None = None
    last_ts: str | None = None
    status: dict[str, str] = Field(default_factory=dict)


M = TypeVar("M", bound=BaseModel)


def _parse(model: type[M], body: bytes) -> M:
    try:
        return model.model_validate_json(body)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"could not decode {model.__name__}: {exc.error_count()} error(s)",
            body=body,
        ) from exc


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------


def decode_availability(body: bytes, queried_url: str) -> AvailabilityResult:
    """Decode an availability API body.

    A missing ``closest`` snapshot, or one without a URL, yields ``found=False``.
    """
    parsed = _parse(AvailabilityResponse, body)
    closest = parsed.archived_snapshots.closest
    if closest is None or not closest.url:
        return AvailabilityResult(queried_url=queried_url, found=False)
    return AvailabilityResult(
        queried_url=queried_url,
        found=True,
        snapshot_url=closest.url,
        snapshot_timestamp=closest.timestamp,
    )


def decode_save(body: bytes) -> SaveResponse:
    """Decode a Save Page Now acknowledgement.

    ``job_id`` may be empty; whether that is acceptable is the caller's call.
    """
    return _parse(SaveResponse, body)


def decode_status(body: bytes) -> JobStatus:
    """Decode a job status body.  ``status`` is the only required key."""
    parsed = _parse(StatusResponse, body)
    return JobStatus(
        job_id=parsed.job_id,
        state=JobState.from_raw(parsed.status),
        raw_status=parsed.status,
        timestamp=parsed.timestamp,
        original_url=parsed.original_url,
    )


def decode_sparkline(body: bytes) -> Sparkline:
    parsed = _parse(SparklineResponse, body)
    return Sparkline(
        years=parsed.years,
        first_ts=parsed.first_ts or "",
        last_ts=parsed.last_ts or "",
        status=parsed.status,
    )

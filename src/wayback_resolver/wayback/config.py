"""Endpoint paths and protocol constants for the Wayback Machine APIs.

Hosts and timing defaults live in :mod:`wayback_resolver.config.settings`;
this module holds the parts of the upstream contract that never change.

Reference: https://archive.org/help/wayback_api.php
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Endpoint paths (appended to Settings.api_base)
# ---------------------------------------------------------------------------

WB_AVAILABILITY_PATH: str = "/wayback/available"
"""Availability API: ``GET ?url={url}`` returns the closest snapshot, if any."""

WB_SAVE_PATH: str = "/save/"
"""Save Page Now: ``POST ?capture_all=1&url={url}`` starts a capture job."""

WB_SAVE_STATUS_PATH: str = "/save/status/{job_id}"
"""Save Page Now job status: ``GET`` returns the current job state."""

WB_SPARKLINE_PATH: str = "/__wb/sparkline/"
"""Sparkline API: capture counts per year for a URL."""

WB_SPARKLINE_PARAMS: dict[str, str] = {"collection": "web", "output": "json"}
"""Fixed query parameters sent with every sparkline request."""

# ---------------------------------------------------------------------------
# Status codes
# ---------------------------------------------------------------------------

HTTP_RATE_LIMITED: int = 429

SAVE_REDIRECT_STATUSES: frozenset[int] = frozenset({301, 302})
"""Legacy Save Page Now replies that carry the archive URL in ``Location``."""

SAVE_DECLINED_STATUSES: frozenset[int] = frozenset({520, 523})
"""Replies meaning archive.org refused to capture the page."""

# ---------------------------------------------------------------------------
# Save request
# ---------------------------------------------------------------------------

SAVE_CAPTURE_ALL: str = "1"
"""Value of ``capture_all``; also captures pages that answer with an error status."""

SAVE_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Content-Type": "application/x-www-form-urlencoded",
}
"""Headers sent with every save request, alongside the session ``Cookie``."""

JOB_STATUS_PENDING: str = "pending"
JOB_STATUS_SUCCESS: str = "success"
JOB_STATUS_ERROR: str = "error"

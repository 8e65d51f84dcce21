"""Single request/response cycle against the Wayback Machine.

Internal module used by :class:`~wayback_resolver.wayback.client.WaybackClient`.

:func:`send` never interprets status codes or payloads: HTTP 429 and 5xx
responses come back as ordinary :class:`RawResponse` objects and the caller
decides what they mean.  Only network-level failures and requests that
cannot be built raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from wayback_resolver.core.exceptions import InvalidRequestError, TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawResponse:
    """A fully read HTTP response.

    Attributes:
        status_code: HTTP status code.
        body: Complete response body.
        headers: Response headers (case-insensitive lookups).
    """

    status_code: int
    body: bytes
    headers: httpx.Headers = field(default_factory=httpx.Headers)


def send(
    client: httpx.Client,
    method: str,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    data: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
    follow_redirects: bool = False,
) -> RawResponse:
    """Send one request and return the fully read response.

    The response is streamed inside a context manager, so its body is drained
    and the connection handed back to the pool on every exit path, including
    when reading the body fails part way.

    Args:
        client: Shared :class:`httpx.Client`.
        method: HTTP method.
        url: Absolute request URL.
        params: Query string parameters.
        data: Form fields sent as an ``application/x-www-form-urlencoded`` body.
        headers: Extra request headers.
        follow_redirects: Whether httpx should follow 3xx responses.

    Returns:
        A :class:`RawResponse`.

    Raises:
        TransportError: On DNS failure, connection reset, timeout or any
            other :class:`httpx.RequestError`.
        InvalidRequestError: If *url* is not a valid URL or a header value
            cannot be encoded.  Nothing is sent in that case.
    """
    try:
        with client.stream(
            method,
            url,
            params=params,
            data=data,
            headers=headers,
            follow_redirects=follow_redirects,
        ) as response:
            body = response.read()
            raw = RawResponse(
                status_code=response.status_code,
                body=body,
                headers=response.headers,
            )
    except httpx.RequestError as exc:
        logger.debug("wayback: %s %s failed: %s", method, url, exc)
        raise TransportError(f"error calling {url}: {exc}", url=url) from exc
    except (httpx.InvalidURL, UnicodeEncodeError) as exc:
        raise InvalidRequestError(f"cannot build request for {url!r}: {exc}", url=url) from exc

    logger.debug("wayback: %s %s -> HTTP %d", method, url, raw.status_code)
    return raw

#!/usr/bin/env python3
"""Reachability probing for http(s) references.

A probe is a single HEAD request with a short timeout. Failures (timeouts,
refused connections, malformed URLs) come back as a result with ``ok=False``;
they are never raised to the caller.

Example:
    >>> result = await probe_url('https://example.com/app.js')
    >>> result.status_line
    '200 OK'
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of probing one URL.

    Attributes:
        url: The URL probed.
        ok: Whether a response was received (any status code).
        status_code: HTTP status code, 0 when unreachable.
        status_message: HTTP reason phrase.
        error: Failure description when unreachable.
    """

    url: str
    ok: bool
    status_code: int = 0
    status_message: str = ""
    error: str = ""

    @property
    def status_line(self) -> str:
        if not self.ok:
            return "unreachable"
        return f"{self.status_code} {self.status_message}".strip()


async def probe_url(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ProbeResult:
    """Send a HEAD request and report the response status.

    Args:
        url: Absolute http(s) URL.
        timeout: Seconds before giving up.
        transport: Optional httpx transport (tests use MockTransport).
    """
    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(timeout), transport=transport, follow_redirects=False
        ) as client:
            response = await client.head(url)
    except httpx.TimeoutException:
        logger.debug("Probe timed out: %s", url)
        return ProbeResult(url=url, ok=False, error="timeout")
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.debug("Probe failed for %s: %s", url, e)
        return ProbeResult(url=url, ok=False, error=str(e) or type(e).__name__)

    return ProbeResult(
        url=url,
        ok=True,
        status_code=response.status_code,
        status_message=response.reason_phrase,
    )

"""
Server time estimation over a single HTTP HEAD probe.

The remote clock is read from the response's ``Date`` header and shifted
forward by half the measured round trip (the NTP midpoint assumption).
Paths are assumed symmetric; the result is a best-effort estimate with no
error bound, and the ``Date`` header limits it to whole-second precision.
"""

import time
from dataclasses import dataclass
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Optional

import httpx
import structlog

from src.time.errors import (
    EstimationError,
    InternalError,
    UpstreamProtocolError,
    UpstreamUnreachable,
)
from src.utils.validation import canonical_origin, normalize_address

logger = structlog.get_logger(__name__)

NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}
DEFAULT_TIMEOUT = 5.0


def monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


@dataclass(frozen=True)
class ProbeResult:
    """Raw observation from one probe."""
    remote_reported_time_ms: int
    round_trip_latency_ms: int


@dataclass(frozen=True)
class TimeEstimate:
    """Latency-compensated estimate of the remote clock."""
    estimated_time_ms: int
    latency_ms: int
    canonical_origin: str


def compensate(probe: ProbeResult) -> int:
    """Shift the reported time by half the round trip, floored."""
    return probe.remote_reported_time_ms + probe.round_trip_latency_ms // 2


def parse_date_header(value: Optional[str]) -> int:
    """Parse an HTTP-date into epoch milliseconds.

    Raises:
        UpstreamProtocolError: if the value is missing or not a valid date
    """
    if not value:
        raise UpstreamProtocolError()
    try:
        moment = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError) as exc:
        raise UpstreamProtocolError() from exc
    if moment is None:
        raise UpstreamProtocolError()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp()) * 1000 + moment.microsecond // 1000


class OffsetEstimator:
    """Estimates a remote web server's clock with one HEAD request."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], int] = monotonic_ms,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.clock = clock
        self.transport = transport

    async def estimate(self, raw_address: Optional[str]) -> TimeEstimate:
        """
        Probe ``raw_address`` and return the compensated remote time.

        Exactly one outbound request is made, and only after the address
        validated. Nothing is retried.

        Raises:
            InvalidInput: empty or malformed address
            UpstreamUnreachable: the request itself failed
            UpstreamProtocolError: no usable Date header in the response
            InternalError: anything unexpected
        """
        address = normalize_address(raw_address)
        origin = canonical_origin(address)

        try:
            probe = await self.probe(address)
        except EstimationError:
            raise
        except Exception as exc:
            logger.error("probe_crashed", url=address, error=str(exc), exc_info=True)
            raise InternalError() from exc

        estimate = TimeEstimate(
            estimated_time_ms=compensate(probe),
            latency_ms=probe.round_trip_latency_ms,
            canonical_origin=origin,
        )
        logger.info(
            "probe_completed",
            url=origin,
            reported_ms=probe.remote_reported_time_ms,
            latency_ms=estimate.latency_ms,
            estimated_ms=estimate.estimated_time_ms,
        )
        return estimate

    async def probe(self, address: str) -> ProbeResult:
        """Issue the HEAD request and read the reported time."""
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            follow_redirects=True,
        ) as client:
            t0 = self.clock()
            try:
                response = await client.head(address, headers=NO_CACHE_HEADERS)
            except httpx.HTTPError as exc:
                logger.warning("probe_failed", url=address, error=repr(exc))
                raise UpstreamUnreachable() from exc
            t1 = self.clock()

        reported = parse_date_header(response.headers.get("date"))
        return ProbeResult(
            remote_reported_time_ms=reported,
            round_trip_latency_ms=max(0, t1 - t0),
        )

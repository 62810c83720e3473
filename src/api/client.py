"""HTTP client for a running time sync API."""

from typing import Optional

import httpx
import structlog

from src.time.errors import EstimationError, UpstreamUnreachable
from src.time.sync import TimeEstimate

logger = structlog.get_logger(__name__)


class RemoteSyncClient:
    """Calls ``POST /sync`` and returns the same TimeEstimate the in-process
    estimator does, so a SyncSession can use either."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def estimate(self, raw_address: Optional[str]) -> TimeEstimate:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post("/sync", json={"url": raw_address})
        except httpx.HTTPError as exc:
            logger.warning("sync_api_unreachable", base_url=self.base_url, error=repr(exc))
            raise UpstreamUnreachable("Failed to fetch") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            message = data.get("error") if isinstance(data, dict) else None
            raise EstimationError(message or "Failed to fetch")

        try:
            return TimeEstimate(
                estimated_time_ms=int(data["serverTime"]),
                latency_ms=int(data["latency"]),
                canonical_origin=str(data["url"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise EstimationError("Failed to fetch") from exc

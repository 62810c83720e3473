"""
REST API for Time Sync

This module serves the clock page and the endpoint that estimates a remote
web server's time from a single HEAD probe.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field, ValidationError
import structlog

from src.config.settings import settings
from src.time.errors import FETCH_FAILED, INVALID_URL, URL_REQUIRED, EstimationError
from src.time.formatting import to_iso8601
from src.time.sync import OffsetEstimator
from src.utils.logging_config import setup_logging

logger = structlog.get_logger(__name__)

INDEX_PATH = Path(__file__).resolve().parents[2] / "public" / "index.html"


# Pydantic models for request/response
class SyncRequest(BaseModel):
    """Request model for a sync"""
    url: Optional[str] = Field(None, description="Target site address, scheme optional")

    class Config:
        json_schema_extra = {
            "example": {"url": "naver.com"}
        }


class SyncResponse(BaseModel):
    """Response model for a successful sync"""
    serverTime: int = Field(..., description="Latency-compensated server time, Unix ms")
    serverTimeISO: str = Field(..., description="serverTime as ISO-8601 (UTC)")
    latency: int = Field(..., description="Measured round trip in milliseconds")
    url: str = Field(..., description="Canonical origin that was probed")

    class Config:
        json_schema_extra = {
            "example": {
                "serverTime": 1700000000020,
                "serverTimeISO": "2023-11-14T22:13:20.020Z",
                "latency": 40,
                "url": "https://naver.com"
            }
        }


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    """Response model for health check"""
    status: str


# Lifespan context manager for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events"""
    setup_logging(settings.LOG_LEVEL, component="api", log_path=settings.LOG_PATH)
    logger.info("api_starting", probe_timeout=settings.PROBE_TIMEOUT_SECONDS)
    yield
    logger.info("api_stopping")


def get_estimator() -> OffsetEstimator:
    return OffsetEstimator(timeout=settings.PROBE_TIMEOUT_SECONDS)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


# Create FastAPI app
app = FastAPI(
    title="Time Sync API",
    description="Estimates a web server's clock from its Date header",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.get("/", response_class=HTMLResponse, tags=["General"])
async def index() -> HTMLResponse:
    """Clock page"""
    return HTMLResponse(INDEX_PATH.read_text(encoding="utf-8"))


@app.post(
    "/sync",
    response_model=SyncResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    tags=["Sync"],
)
@app.post("/api/server-time", response_model=SyncResponse, include_in_schema=False)
async def sync(req: Request, estimator: OffsetEstimator = Depends(get_estimator)):
    """
    Estimate a site's server time

    Sends one HEAD request to the site, reads its Date header and adds
    half the measured round trip.

    - **url**: site address; ``https://`` is assumed when no scheme is given
    """
    try:
        body = await req.json()
    except ValueError as e:
        logger.error("sync_bad_body", error=str(e))
        return _error(FETCH_FAILED, 500)

    url = body.get("url") if isinstance(body, dict) else None
    if url is None or url == "":
        return _error(URL_REQUIRED, 400)

    try:
        payload = SyncRequest(url=url)
    except ValidationError:
        return _error(INVALID_URL, 400)

    try:
        estimate = await estimator.estimate(payload.url)
    except EstimationError as e:
        logger.info("sync_rejected", url=payload.url, error=e.message, status=e.status_code)
        return _error(e.message, e.status_code)
    except Exception as e:
        logger.error("sync_crashed", url=payload.url, error=str(e), exc_info=True)
        return _error(FETCH_FAILED, 500)

    return SyncResponse(
        serverTime=estimate.estimated_time_ms,
        serverTimeISO=to_iso8601(estimate.estimated_time_ms),
        latency=estimate.latency_ms,
        url=estimate.canonical_origin,
    )


@app.get("/health/liveness", response_model=HealthResponse, tags=["Health"])
async def liveness():
    """
    Liveness probe - checks if the service is running
    """
    return HealthResponse(status="alive")


# Run with: uvicorn src.api.rest_api:app --host 0.0.0.0 --port 8000 --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "src.api.rest_api:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True,
        log_level="info"
    )

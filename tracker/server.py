"""
HTTP surface for the Shipment Tracker.

Endpoints:
1. GET /track?number=<order or tracking number> - Combined tracking timeline
2. OPTIONS /track - CORS preflight

Both are also served under /api/track.
"""

from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response
from loguru import logger

from tracker import __version__
from tracker.config import TrackerConfig, get_config
from tracker.exceptions import ConfigurationError
from tracker.logging_config import RequestLogger, setup_logging
from tracker.tracking.service import TrackingService


TRACK_PATHS = ("/track", "/api/track")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
}

MISSING_NUMBER_ERROR = "Missing tracking number"
FETCH_FAILED_ERROR = "Failed to fetch tracking data"


def create_app(
    config: Optional[TrackerConfig] = None,
    service: Optional[TrackingService] = None,
) -> FastAPI:
    """Build the FastAPI application."""
    config = config or get_config()
    service = service or TrackingService(config)

    app = FastAPI(title="Shipment Tracker", version=__version__)
    app.state.config = config
    app.state.service = service

    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    async def track_preflight() -> Response:
        return Response(status_code=200)

    async def track(number: Optional[str] = Query(None)) -> JSONResponse:
        """Combined tracking for an order number or a YunExpress tracking number."""
        if not number:
            return JSONResponse(status_code=400, content={"error": MISSING_NUMBER_ERROR})

        req_log = RequestLogger(number)
        req_log.info(f"Tracking lookup: {number}")

        try:
            result = await service.track(number)
        except Exception:
            req_log.exception("Tracking API error")
            return JSONResponse(status_code=500, content={"error": FETCH_FAILED_ERROR})

        req_log.info(f"Returning {len(result.events)} events")
        return JSONResponse(status_code=200, content=result.to_response())

    for path in TRACK_PATHS:
        app.add_api_route(path, track, methods=["GET"])
        app.add_api_route(path, track_preflight, methods=["OPTIONS"], include_in_schema=False)

    return app


def run_server(config: Optional[TrackerConfig] = None, host: Optional[str] = None, port: Optional[int] = None):
    """Run the tracker under uvicorn."""
    import uvicorn

    config = config or get_config()
    setup_logging(config)

    problems = config.validate()
    for problem in problems:
        logger.warning(f"Config: {problem}")

    missing = [p for p in problems if not p.startswith("Warning")]
    if missing:
        raise ConfigurationError("; ".join(missing))

    host = host or config.host
    port = port or config.port
    logger.info(f"Starting Shipment Tracker v{__version__} on {host}:{port}")

    uvicorn.run(create_app(config), host=host, port=port, log_level=config.log_level.lower())

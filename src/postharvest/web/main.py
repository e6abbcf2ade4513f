"""
FastAPI application for PostHarvest.

Exposes post extraction, a media proxy for origins that refuse cross-origin
fetches, ZIP packaging of extracted content, health and Prometheus metrics.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional
from uuid import uuid4

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.background import BackgroundTask

from postharvest.archive import ArchiveBuilder, archive_name
from postharvest.config.config import Config, load_config
from postharvest.crawler.http_client import PageFetcher
from postharvest.errors import AllStrategiesFailedError, InvalidInputError, NetworkError
from postharvest.extractor.manager import ExtractorManager
from postharvest.extractor.models import DownloadRequest, ExtractedContent, ExtractRequest
from postharvest.observability.logging import configure_logging
from postharvest.observability.metrics import METRICS, status_class
from postharvest.security.validation import validate_proxy_url

logger = structlog.get_logger(__name__)

INVALID_REQUEST = "Invalid request data"

# Upstream headers forwarded by the media proxy
_PROXIED_HEADERS = ("content-length", "content-encoding", "cache-control", "last-modified", "etag")


def _validation_details(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")} for err in errors]


def create_app(
    config: Optional[Config] = None,
    manager: Optional[ExtractorManager] = None,
    fetcher: Optional[PageFetcher] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Application configuration; loaded from file/environment when None
        manager: Extraction orchestrator; built from ``config`` when None
        fetcher: Fetcher used by the proxy and archive endpoints
    """
    config = config or load_config()
    fetcher = fetcher or PageFetcher(config.crawler)
    manager = manager or ExtractorManager(config, fetcher=fetcher)
    archive_builder = ArchiveBuilder(fetcher)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Manage application lifecycle."""
        app.state.start_time = time.time()
        logger.info(
            "Starting PostHarvest API",
            version=config.version,
            cascade_order=manager.cascade_order,
            rendering_configured=config.rendering.configured,
        )
        yield
        logger.info("Shutting down PostHarvest API", strategy_metrics=manager.get_metrics())

    app = FastAPI(title="PostHarvest", version=config.version, lifespan=lifespan)
    app.state.config = config
    app.state.manager = manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.monitoring.web_ui.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next: Callable) -> Any:
        """Bind a request id into the logging context and time the request."""
        start_time = time.time()
        request_id = request.headers.get("x-request-id") or str(uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Process-Time"] = str(process_time)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            response_time_ms=round(process_time * 1000, 2),
        )
        return response

    # -- error translation --------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": INVALID_REQUEST, "details": _validation_details(list(exc.errors()))},
        )

    @app.exception_handler(InvalidInputError)
    async def handle_invalid_input(request: Request, exc: InvalidInputError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "error": INVALID_REQUEST,
                "details": [{"loc": ["url"], "msg": str(exc), "type": "value_error"}],
            },
        )

    @app.exception_handler(AllStrategiesFailedError)
    async def handle_all_failed(request: Request, exc: AllStrategiesFailedError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"error": exc.message, "details": exc.summary()})

    # -- routes -------------------------------------------------------------

    @app.post("/extract", response_model=ExtractedContent)
    @app.post("/api/linkedin/extract", response_model=ExtractedContent)
    async def extract(body: ExtractRequest) -> ExtractedContent:
        """Extract text and media from a LinkedIn post."""
        return await manager.extract(body.url, demo_mode=body.demo_mode)

    @app.get("/proxy")
    async def proxy(url: str = Query(..., description="Absolute HTTP(S) URL of the media to fetch")) -> Response:
        """Stream a remote media resource back with browser-like request headers."""
        target = validate_proxy_url(url)
        try:
            stream = await fetcher.open_media_stream(target)
        except NetworkError as e:
            METRICS["proxy_requests"].labels(status_class="error").inc()
            logger.warning("Proxy upstream unreachable", url=target, error=str(e))
            return Response(status_code=502)

        METRICS["proxy_requests"].labels(status_class=status_class(stream.status_code)).inc()
        if not stream.is_success:
            await stream.aclose()
            logger.info("Proxy upstream returned non-success status", url=target, status=stream.status_code)
            return Response(status_code=stream.status_code)

        upstream = stream.response.headers
        headers = {name: upstream[name] for name in _PROXIED_HEADERS if name in upstream}
        return StreamingResponse(
            stream.response.aiter_raw(config.crawler.proxy_chunk_size),
            status_code=stream.status_code,
            media_type=upstream.get("content-type", "application/octet-stream"),
            headers=headers,
            background=BackgroundTask(stream.aclose),
        )

    @app.post("/download")
    async def download(body: DownloadRequest) -> Response:
        """Package the selected content into a ZIP archive."""
        data = await archive_builder.build(body.content, body.selection)
        return Response(
            content=data,
            media_type="application/zip",
            headers={"Content-Disposition": f'attachment; filename="{archive_name(body.selection)}"'},
        )

    @app.get("/health")
    @app.get("/api/health")
    async def health_check() -> Dict[str, Any]:
        """Liveness probe."""
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/metrics")
    async def get_prometheus_metrics() -> Response:
        """Endpoint for Prometheus to scrape."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


def run_web_server(host: Optional[str] = None, port: Optional[int] = None, config: Optional[Config] = None) -> None:
    """Function to run the FastAPI server."""
    import uvicorn

    config = config or load_config()
    configure_logging(config.monitoring)
    host = host or config.monitoring.web_ui.host
    port = port or config.monitoring.web_ui.port

    logger.info("Starting PostHarvest API server", url=f"http://{host}:{port}")
    uvicorn.run(create_app(config), host=host, port=port, log_config=None)

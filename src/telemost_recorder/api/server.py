"""
API Server - FastAPI application exposing the recorder over HTTP.

Provides:
- POST /api/record to record a meeting and download the audio
- Health check endpoint with browser pool state
- JSON error responses for every failure
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from telemost_recorder import __version__
from telemost_recorder.browsers.pool import BrowserPool
from telemost_recorder.config import Settings, get_settings
from telemost_recorder.exceptions.base import TelemostRecorderError
from telemost_recorder.utils.files import ensure_directory_exists

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: str, message: str, details: Any = None) -> JSONResponse:
    """Build the JSON body every failed request answers with."""
    content = {"success": False, "error": error, "message": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def create_app(settings: Optional[Settings] = None, pool: Optional[BrowserPool] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Settings to use (defaults to the global settings)
        pool: Shared browser pool (created from settings when omitted)

    Returns:
        FastAPI application instance
    """
    settings = settings or get_settings()
    pool = pool or BrowserPool(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        ensure_directory_exists(settings.recording.output_dir)
        logger.info(f"Recordings directory: {settings.recording.output_dir}")
        yield
        await pool.close()

    app = FastAPI(
        title="Telemost Recorder",
        description="Records the audio of Yandex Telemost meetings",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.pool = pool

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Recording-ID", "X-File-Size", "X-Recording-Duration"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Any) -> Any:
        logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    @app.exception_handler(TelemostRecorderError)
    async def handle_recorder_error(request: Request, exc: TelemostRecorderError) -> JSONResponse:
        logger.error(f"{exc.code}: {exc}")
        return error_response(exc.status_code, exc.code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
            for err in exc.errors()
        ]
        return error_response(400, "validation_error", "Invalid request parameters", {"errors": errors})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return error_response(404, "not_found", "Endpoint not found. Available: POST /api/record, GET /health")
        return error_response(exc.status_code, "http_error", str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error: {exc}")
        return error_response(500, "internal_error", "Internal server error")

    from telemost_recorder.api.routes import register_routes
    register_routes(app)

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None, settings: Optional[Settings] = None) -> None:
    """
    Run the API server with uvicorn.

    Args:
        host: Host to bind to (defaults to server.host)
        port: Port to bind to (defaults to server.port)
        settings: Settings to use (defaults to the global settings)
    """
    import uvicorn

    settings = settings or get_settings()
    app = create_app(settings)

    host = host or settings.server.host
    port = port or settings.server.port
    logger.info(f"Starting Telemost Recorder API at http://{host}:{port}")

    uvicorn.run(app, host=host, port=port, log_level=settings.logging.level.lower())

"""
Snap2Slides Backend: FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() builds the services, registers the
       middleware, exception handlers and routes, and returns the app.
Who:   uvicorn (uvicorn snap2slides.main:app) and the test suite.
When:  Once at server startup.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware:  Rate Limit → Request ID → Logging          │
    │                                                          │
    │  Routes:      /api/gemini-vision   /api/analyze          │
    │               /api/slides          /api/status           │
    │               /api/generate        /health               │
    │                                                          │
    │  app.state:   settings, endpoint_manager, slides_store,  │
    │               file_service, slide_service                │
    │                                                          │
    │  Exception Handlers:                                     │
    │    Validation→400  NotFound→404  RateLimit→429           │
    │    ServiceUnavailable→503  anything else→500             │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, report missing credentials, log pool size
    Shutdown: log shutdown (all state is in memory)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from snap2slides import __version__
from snap2slides.config import Settings, settings as default_settings
from snap2slides.exceptions import (
    NotFoundError,
    ServiceUnavailableError,
    Snap2SlidesError,
    ValidationError,
)
from snap2slides.middleware.logging import RequestLoggingMiddleware
from snap2slides.middleware.rate_limit import RateLimitMiddleware
from snap2slides.middleware.request_id import RequestIDMiddleware, request_id_var
from snap2slides.routes import generate, health, slides, status, vision
from snap2slides.services.endpoint_manager import EndpointPoolManager
from snap2slides.services.file_service import FileService
from snap2slides.services.gemini_service import GeminiVisionClient
from snap2slides.services.perplexity_service import PerplexityResearchClient
from snap2slides.services.slide_service import SlideService
from snap2slides.services.slides_store import SlidesStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger for the whole application.

    Format: 2024-01-15T12:00:00 [INFO] snap2slides.services.endpoint_manager: ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Configure logging at the configured level
        2. Report missing credentials (the server still starts and serves
           demo content plus health and status)
        3. Log the configured endpoint pool
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Snap2Slides Backend starting up...")

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Uploads will return demo content until a Gemini key is configured.")

    manager: EndpointPoolManager = app.state.endpoint_manager
    logger.info("Endpoint pool: %s", [e.id for e in manager.endpoints])
    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Snap2Slides Backend shutting down...")
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler hierarchy:
        ValidationError          → 400
        NotFoundError            → 404 (details carry e.g. available_ids)
        ServiceUnavailableError  → 503, Retry-After when known
        Snap2SlidesError (base)  → 500
        Exception                → 500, stack trace logged only

    5xx bodies never include exception context; it is logged server-side.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message, exc.context),
        )

    @app.exception_handler(ServiceUnavailableError)
    async def handle_service_unavailable(request: Request, exc: ServiceUnavailableError):
        logger.error(
            "[%s] Service unavailable: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else {}
        return JSONResponse(
            status_code=503,
            content=_error_body("service_unavailable", exc.message),
            headers=headers,
        )

    @app.exception_handler(Snap2SlidesError)
    async def handle_app_error(request: Request, exc: Snap2SlidesError):
        logger.error(
            "[%s] Unhandled application error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    endpoint_manager: Optional[EndpointPoolManager] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings:      Defaults to the environment-backed `settings`
        endpoint_manager:  Defaults to one built from app_settings with the
                           real Gemini and Perplexity clients

    Services are built here rather than in the lifespan so that an app
    driven by httpx.ASGITransport (which does not run lifespan) is usable.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="Snap2Slides API",
        description=(
            "Turns photos and documents into presentation slides using a rotating "
            "pool of Google Gemini keys, with optional Perplexity research insights."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Services ──────────────────────────────────────────────────────────
    manager = endpoint_manager or EndpointPoolManager.from_settings(
        app_settings,
        vision_client=GeminiVisionClient.from_settings(app_settings),
        research_client=PerplexityResearchClient.from_settings(app_settings),
    )
    file_service = FileService.from_settings(app_settings)

    app.state.settings = app_settings
    app.state.endpoint_manager = manager
    app.state.file_service = file_service
    app.state.slides_store = SlidesStore()
    app.state.slide_service = SlideService(manager=manager, file_service=file_service)

    # ── Middleware ────────────────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=app_settings.cors_origins_list != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window,
    )

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(vision.router)
    app.include_router(slides.router)
    app.include_router(status.router)
    app.include_router(generate.router)
    app.include_router(health.router)

    return app


app = create_app()

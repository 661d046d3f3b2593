"""
DrawCalc Backend - FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application, and the `drawcalc`
       console entry point that serves it.
How:   create_app() is the composition root: it owns the Settings and the
       InferenceClientProvider and wires middleware, handlers and routes.
Who:   `drawcalc` / `python -m drawcalc` call run(); `uvicorn drawcalc.main:app`
       uses the module-level app.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │    CORS      │→│ Req ID   │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────────┐ ┌─────────────┐ ┌───────────┐   │
    │  │ POST /calculate│ │ GET /health │ │  * /      │   │
    │  └────────────────┘ └─────────────┘ └───────────┘   │
    │                                                     │
    │  Exception Handlers (text/plain bodies):            │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ ClientInput→400 │ 404→empty 200 │ rest→500   │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, then an eager attempt to build the inference client.
              Under run() a failure exits the process with status 1; under a
              bare `uvicorn drawcalc.main:app` it is logged and /calculate
              answers 500 while /health keeps answering.
    Shutdown: close the inference client.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from drawcalc import __version__
from drawcalc.config import Settings, settings as default_settings
from drawcalc.exceptions import (
    ClientInputError,
    ConfigurationError,
    DrawCalcError,
    UpstreamServiceError,
)
from drawcalc.middleware.cors import CORSHeadersMiddleware, cors_headers
from drawcalc.middleware.logging import AccessLogMiddleware
from drawcalc.middleware.request_id import RequestIDMiddleware, request_id_var
from drawcalc.routes import calculate, health, root
from drawcalc.services.client_provider import InferenceClientProvider
from drawcalc.services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Safe to call more than once (force=True replaces earlier handlers).
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # drawcalc.access already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings
    provider: InferenceClientProvider = app.state.client_provider

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("DrawCalc Backend %s starting up...", __version__)

    try:
        provider.get()
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e.message)
        logger.error("/calculate will fail until the configuration is fixed and the server restarted.")

    logger.info("Listening on port %d", app_settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("DrawCalc Backend shutting down...")
    provider.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to plain-text responses.

    Handler hierarchy:
        ClientInputError        → 400, logged at WARNING
        UpstreamServiceError    → 500, logged at ERROR with its context
        DrawCalcError (base)    → exc.status_code, logged at ERROR
        404 (no route matched)  → empty 200, like `/`
        HTTPException           → its own status (405), body = detail
        Exception (fallback)    → 500 "Internal Server Error", traceback logged
    """

    app.add_exception_handler(404, root.answer_unmatched_path)

    @app.exception_handler(ClientInputError)
    async def handle_client_input_error(request: Request, exc: ClientInputError):
        rid = request_id_var.get("")
        logger.warning("[%s] %s | Context: %s", rid, exc.message, exc.context)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(UpstreamServiceError)
    async def handle_upstream_error(request: Request, exc: UpstreamServiceError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] Inference failed (%s): %s | Context: %s",
            rid,
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(DrawCalcError)
    async def handle_drawcalc_error(request: Request, exc: DrawCalcError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] %s: %s | Context: %s",
            rid,
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return PlainTextResponse(
            str(exc.detail),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        This handler runs outside the middleware stack, so the CORS headers
        are attached here explicitly.
        """
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        app_settings: Settings = request.app.state.settings
        return PlainTextResponse(
            "Internal Server Error",
            status_code=500,
            headers=cors_headers(
                app_settings.cors_allow_origin,
                app_settings.cors_allow_methods,
                app_settings.cors_allow_headers,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    client_provider: Optional[InferenceClientProvider] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; the module-level settings when omitted.
        client_provider: Provider of the inference client. When omitted one is
            built around GeminiClient.from_settings; nothing is constructed
            until the first get().
    """
    app_settings = settings or default_settings
    provider = client_provider or InferenceClientProvider(
        lambda: GeminiClient.from_settings(app_settings)
    )

    app = FastAPI(
        title="DrawCalc API",
        description=(
            "Solves handwritten math drawings with Google Gemini. "
            "Upload a drawing and get back expression/result pairs."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.client_provider = provider

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: CORS → RequestID → Logging → route
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSHeadersMiddleware,
        allow_origin=app_settings.cors_allow_origin,
        allow_methods=app_settings.cors_allow_methods,
        allow_headers=app_settings.cors_allow_headers,
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(calculate.router)
    app.include_router(health.router)
    app.include_router(root.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# For `uvicorn drawcalc.main:app`; the inference client is built lazily
app = create_app()


# ══════════════════════════════════════════════════════════════════════════
# Console Entry Point
# ══════════════════════════════════════════════════════════════════════════

def run() -> None:
    """
    Build the inference client, then serve on HOST:PORT.

    Exits with status 1 when the client cannot be constructed or the
    listener cannot bind.
    """
    app_settings = default_settings
    setup_logging(app_settings.log_level)

    provider = InferenceClientProvider(lambda: GeminiClient.from_settings(app_settings))
    try:
        provider.get()
    except DrawCalcError as e:
        logger.critical("Cannot start DrawCalc Backend: %s", e.message)
        sys.exit(1)

    application = create_app(settings=app_settings, client_provider=provider)

    logger.info("Starting server at %s:%d", app_settings.host, app_settings.port)
    # A bind failure is logged by uvicorn, which then exits with status 1
    uvicorn.run(
        application,
        host=app_settings.host,
        port=app_settings.port,
        log_config=None,
    )

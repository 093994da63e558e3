"""
FastAPI Application Setup.

Main application factory for the IdeaScope premium API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ideascope.api.middleware.logging import RequestLoggingMiddleware
from ideascope.api.routes import health, metrics, premium
from ideascope.api.schemas.exceptions import APIException, ValidationError, field_errors
from ideascope.config import get_cache_config
from ideascope.context import PremiumContext
from ideascope.core.exceptions import GenerationError
from ideascope.llm.client import LLMClient
from ideascope.version import __version__

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Start the cache supervisor on startup and stop it on shutdown.
    """
    context: PremiumContext = app.state.context
    logger.info("IdeaScope API starting up...")
    logger.info(f"Version: {__version__}")
    context.supervisor.start()

    yield

    logger.info("IdeaScope API shutting down...")
    await context.close()


def _error_body(error_type: str, message: str, detail: str | None = None) -> dict:
    return {"error": {"type": error_type, "message": message, "detail": detail}}


def create_app(
    context: PremiumContext | None = None,
    title: str = "IdeaScope Premium API",
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        context: Application context; built from the environment when omitted
        title: Application title for OpenAPI docs

    Returns:
        Configured FastAPI application instance
    """
    if context is None:
        context = PremiumContext.create(get_cache_config(), llm_client=LLMClient())

    app = FastAPI(
        title=title,
        description="Premium startup-analysis artifacts with TTL caching",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.context = context

    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(premium.router, prefix="/api/premium", tags=["Premium"])
    app.include_router(metrics.router, prefix="/metrics", tags=["Metrics"])

    # Exception handlers
    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
        """Handle API exceptions with proper error responses."""
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_type, exc.message, exc.detail),
        )

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        """Handle validation errors with detailed field information."""
        return JSONResponse(
            status_code=400,
            content={
                "error": {
                    "type": "validation_error",
                    "message": "Request validation failed",
                    "fields": exc.fields,
                }
            },
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed bodies and query strings as 400."""
        return await validation_exception_handler(
            request, ValidationError(field_errors(list(exc.errors())))
        )

    @app.exception_handler(GenerationError)
    async def generation_error_handler(
        request: Request, exc: GenerationError
    ) -> JSONResponse:
        """Upstream generation failures; nothing was cached."""
        logger.warning(
            f"Generation failed: {exc.message}",
            extra={
                "event": "generation_error_response",
                "kind": exc.details.get("kind"),
                "analysis_id": exc.details.get("analysis_id"),
            },
        )
        return JSONResponse(
            status_code=502,
            content=_error_body(
                "generation_failed", exc.message, exc.details.get("cause")
            ),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_error",
                "An unexpected error occurred",
                str(exc) if logger.isEnabledFor(logging.DEBUG) else None,
            ),
        )

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, object]:
        """Root endpoint with API information."""
        return {
            "name": "IdeaScope Premium API",
            "version": __version__,
            "status": "operational",
            "docs": "/docs",
            "health": "/health",
            "metrics": "/metrics",
            "premium": "/api/premium",
        }

    return app


# Default app instance for ASGI servers
app = create_app()

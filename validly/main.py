"""Main FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from validly.api.middleware import RequestIDMiddleware
from validly.api.routes import health_router, validate_router
from validly.core.config import get_settings
from validly.core.logging import get_logger, setup_logging
from validly.models.validation import ErrorKind, ValidationResult

settings = get_settings()
setup_logging(settings)
logger = get_logger(__name__)

MISSING_INPUT_MESSAGE = "Provider and API key are required"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    logger.info(
        "Starting Validly service",
        extra={"version": settings.version, "debug": settings.debug},
    )
    yield
    logger.info("Shutting down Validly service")


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Report malformed request bodies as 400 in the validation result shape.

    Error details are not echoed back because they may contain the submitted key.
    """
    logger.info(
        "Malformed request body",
        extra={"path": request.url.path, "error_count": len(exc.errors())},
    )
    body = ValidationResult(
        is_valid=False,
        error=MISSING_INPUT_MESSAGE,
        error_kind=ErrorKind.INPUT_ERROR,
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="Validate LLM provider API keys and estimate their remaining quota",
        version=settings.version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        debug=settings.debug,
    )

    # Request ID middleware first so every request is tracked
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

    app.include_router(health_router)
    app.include_router(validate_router)

    logger.info("FastAPI application created successfully")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "validly.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )

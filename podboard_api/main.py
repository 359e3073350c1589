import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from podboard.errors import (
    InvalidInputError,
    JobCancelledError,
    NotFoundError,
    PipelineStageError,
    PodBoardError,
    QuotaExceededError,
)
from podboard_api.api.v1.router import api_router
from podboard_api.core.config import Settings, get_settings
from podboard_api.core.services import create_services
from podboard_api.schemas.v1.responses import ErrorResponse

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    force=True,
)

_logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type[PodBoardError], int] = {
    InvalidInputError: 400,
    QuotaExceededError: 402,
    NotFoundError: 404,
    JobCancelledError: 409,
    PipelineStageError: 500,
}


def _error_response(
    status_code: int, message: str, error_type: str, detail: Optional[str] = None
) -> JSONResponse:
    body = ErrorResponse(error=message, type=error_type, detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def podboard_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Translate core errors into JSON error responses."""
    status_code = next(
        (code for kind, code in _STATUS_CODES.items() if isinstance(exc, kind)), 500
    )
    if isinstance(exc, PipelineStageError):
        _logger.error("Processing failed at %s: %s", exc.stage, exc.reason)
        return _error_response(
            status_code, "Failed to process media", type(exc).__name__, str(exc)
        )
    return _error_response(status_code, str(exc), type(exc).__name__)


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    message = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in errors
    )
    return _error_response(400, message or "Invalid request", "InvalidInputError")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = app.state.settings
    _logger.info(f"Starting {settings.project_name} v{settings.version}")
    yield
    _logger.info(f"Shutting down {settings.project_name}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        description="Turn podcasts and videos into segmented, annotatable timelines",
        docs_url="/docs",
        redoc_url=None,  # Disable ReDoc
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = create_services(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=["*"],
    )

    app.add_exception_handler(PodBoardError, podboard_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Include API router
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    # Root endpoint
    @app.get("/")
    async def root():
        return JSONResponse(
            {
                "message": f"Welcome to {settings.project_name}",
                "version": settings.version,
                "docs": "/docs",
                "api": settings.api_v1_prefix,
                "health": f"{settings.api_v1_prefix}/health",
            }
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "podboard_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        reload=settings.debug,
    )

"""Code Studio - FastAPI application."""

from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import AsyncIterator

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from studio_api.api.v1.router import api_router
from studio_api.config import Settings, get_settings
from studio_api.errors import StudioError, ValidationError
from studio_api.observability import configure_logging, setup_telemetry
from studio_api.services import ChatResponder, CodeGenerator, build_assistant
from studio_api.storage import Storage, build_storage

logger = structlog.get_logger()


def _error_details(errors: list[dict]) -> list[dict]:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in errors]


async def studio_error_handler(request: Request, exc: StudioError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Request failed",
        path=request.url.path,
        code=exc.code,
        error=exc.message,
        exc_info=exc.status_code >= 500,
    )
    body = exc.to_dict()
    if isinstance(exc, ValidationError) and exc.errors:
        body["details"] = _error_details(exc.errors)
    return JSONResponse(status_code=exc.status_code, content=body)


async def request_validation_handler(
    request: Request, exc: RequestValidationError | PydanticValidationError
) -> JSONResponse:
    logger.warning("Invalid request data", path=request.url.path)
    body = ValidationError().to_dict()
    body["details"] = _error_details(exc.errors())
    return JSONResponse(status_code=400, content=body)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors (unknown path, wrong method) in the API error shape."""
    try:
        code = HTTPStatus(exc.status_code).name
    except ValueError:
        code = "HTTP_ERROR"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "code": code},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(status_code=500, content=StudioError().to_dict())


def create_app(
    settings: Settings | None = None,
    storage: Storage | None = None,
    assistant: (CodeGenerator | ChatResponder) | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use (defaults to environment settings)
        storage: Storage backend; built from settings at startup when omitted
        assistant: Code generator / chat responder; built from settings when omitted
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Application lifespan handler."""
        # Startup
        logger.info("Starting Code Studio API", version=settings.app_version)
        setup_telemetry(settings)
        owns_storage = getattr(app.state, "storage", None) is None
        if owns_storage:
            app.state.storage = await build_storage(settings)
        yield
        # Shutdown
        if owns_storage:
            await app.state.storage.close()
        logger.info("Shutting down Code Studio API")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Project, file and version history API for the code editor",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.storage = storage
    app.state.assistant = assistant or build_assistant(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StudioError, studio_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(PydanticValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check(request: Request) -> dict[str, str]:
        """Health check endpoint."""
        storage = request.app.state.storage
        return {
            "status": "healthy",
            "version": settings.app_version,
            "storage": storage.name if storage is not None else "uninitialized",
        }

    return app


app = create_app()

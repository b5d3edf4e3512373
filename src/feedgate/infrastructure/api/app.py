"""FeedGate HTTP application.

``create_app`` wires settings, the token codec, the auth routes, health
checks, the error responder and request logging into one FastAPI app.
"""

import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from feedgate.core.config import Settings, get_settings
from feedgate.core.exceptions import FeedGateError, NotAuthenticatedError, ValidationFailedError
from feedgate.core.logging import bind_correlation_id, clear_context, configure_logging, get_logger
from feedgate.infrastructure.auth import TokenCodec
from feedgate.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the credential store on startup and close it on shutdown.

    Refuses to start in production while the default signing secret is
    configured.
    """
    settings: Settings = app.state.settings
    configure_logging(settings)
    logger.info(
        "Starting FeedGate",
        version=settings.app_version,
        environment=settings.environment,
        key_id=settings.secret_key_id,
    )

    if settings.uses_default_secret:
        if settings.is_production:
            raise RuntimeError("FEEDGATE_SECRET_KEY must be set in production")
        logger.warning("Signing tokens with the default secret; set FEEDGATE_SECRET_KEY")

    try:
        await init_database()
    except Exception as e:
        logger.error("Credential store unavailable at startup", error=str(e))
        raise

    try:
        yield
    finally:
        await close_database()
        logger.info("FeedGate stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration to build from. Defaults to ``get_settings()``.
    """
    settings = settings or get_settings()
    api_docs = settings.is_development

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Signup, login and bearer-token gate for the feed API",
        docs_url="/docs" if api_docs else None,
        redoc_url=None,
        openapi_url="/openapi.json" if api_docs else None,
        lifespan=lifespan,
    )

    # Handlers reach these through dependencies
    app.state.settings = settings
    app.state.token_codec = TokenCodec.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app)
    return app


def register_health_check(app: FastAPI) -> None:
    """Mount ``/health`` (liveness) and ``/ready`` (credential store reachable)."""

    @app.get("/health", tags=["health"])
    async def health():
        settings: Settings = app.state.settings
        return {"status": "healthy", "service": settings.app_name, "version": settings.app_version}

    @app.get("/ready", tags=["health"])
    async def ready():
        if await get_db_manager().check_connection():
            return {"status": "ready", "database": "connected"}
        return JSONResponse(status_code=503, content={"status": "not_ready", "database": "disconnected"})


def register_routes(app: FastAPI) -> None:
    from feedgate.infrastructure.api.routes import auth_router

    app.include_router(auth_router, prefix=f"{app.state.settings.api_prefix}/auth", tags=["auth"])


def error_response(
    status_code: int,
    message: str,
    data: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the ``{"message", "data"}`` body every error uses."""
    return JSONResponse(status_code=status_code, content={"message": message, "data": data}, headers=headers)


def _field_errors(exc: RequestValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
            "code": error["type"],
        }
        for error in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """Install the single error responder.

    ``FeedGateError`` subclasses carry their own status, message and data.
    Request-body parse errors become 422 with field errors. Anything else
    is a 500 whose detail is only shown with ``debug`` on.
    """

    @app.exception_handler(FeedGateError)
    async def feedgate_error(request: Request, exc: FeedGateError):
        headers = None
        if isinstance(exc, NotAuthenticatedError):
            headers = {"WWW-Authenticate": "Bearer"}
        if exc.status_code >= 500:
            logger.error("Request failed", path=request.url.path, error=exc.message, exc_type=type(exc).__name__)
        return error_response(exc.status_code, exc.message, exc.data, headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return error_response(422, ValidationFailedError.default_message, _field_errors(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        return internal_error_response(request, exc)


def internal_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Log an exception no handler claimed and render it as a 500.

    The exception text is only exposed with ``debug`` on.
    """
    logger.error(
        "Unhandled exception",
        method=request.method,
        path=request.url.path,
        error=str(exc),
        exc_type=type(exc).__name__,
    )
    message = str(exc) if request.app.state.settings.debug else "Internal server error"
    return error_response(500, message)


def register_middleware(app: FastAPI) -> None:
    """Tag each request with a correlation id and log its outcome."""

    @app.middleware("http")
    async def correlation_logging(request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or f"cid_{uuid.uuid4().hex[:12]}"
        bind_correlation_id(correlation_id)
        try:
            try:
                response = await call_next(request)
            except Exception as e:
                # 500s carry the correlation id too
                response = internal_error_response(request, e)
            logger.info(
                "Request handled",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        finally:
            clear_context()


app = create_app()

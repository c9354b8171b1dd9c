"""Application factory for the FastAPI backend."""

from __future__ import annotations

import re
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import load_environment
from ..config_manager import get_settings
from ..database import init_db
from ..errors import BookVaultError, DuplicateIsbnError, ValidationError, collect_field_errors
from ..logging_manager import configure_logging_level, get_logger, log_context
from .admin_routes import router as admin_router
from .books_routes import router as books_router
from .user_routes import router as user_router

load_environment()

LOGGER = get_logger().getChild("webapi")

REQUEST_ID_HEADER = "X-Request-Id"
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def _configure_cors(app: FastAPI) -> None:
    allowed_origins = get_settings().cors_origin_list()
    # Wildcard origins cannot be combined with credentials.
    allow_credentials = "*" not in allowed_origins
    if not allow_credentials:
        allowed_origins = ["*"]
    if not allowed_origins:
        LOGGER.info("CORS middleware disabled; no allowed origins configured.")
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )


def _error_body(exc: BookVaultError) -> dict:
    body: dict = {"detail": exc.message}
    if isinstance(exc, ValidationError):
        body["errors"] = exc.field_errors
    elif isinstance(exc, DuplicateIsbnError):
        body["errors"] = {"isbn13": [exc.message]}
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookVaultError)
    async def _handle_bookvault_error(request: Request, exc: BookVaultError) -> JSONResponse:
        log = LOGGER.error if exc.status_code >= 500 else LOGGER.info
        log(
            "Request failed",
            extra={
                "event": "http.error",
                "status": exc.status_code,
                "attributes": {
                    "path": request.url.path,
                    "error": type(exc).__name__,
                    "message": exc.message,
                },
            },
        )
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def _handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "detail": ValidationError.public_message,
                "errors": collect_field_errors(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception(
            "Unhandled error",
            extra={"event": "http.unhandled", "status": 500, "attributes": {"path": request.url.path}},
        )
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def _register_request_context(app: FastAPI) -> None:
    @app.middleware("http")
    async def _request_context(request: Request, call_next):
        candidate = request.headers.get(REQUEST_ID_HEADER, "")
        correlation_id = candidate if _REQUEST_ID_PATTERN.match(candidate) else uuid.uuid4().hex
        with log_context(correlation_id=correlation_id):
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = correlation_id
        return response


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging_level(get_settings().log_level)
    init_db()
    yield


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    app = FastAPI(title="BookVault API", version="0.1.0", lifespan=_lifespan)

    register_exception_handlers(app)
    _register_request_context(app)
    _configure_cors(app)

    @app.get("/_health", tags=["health"])
    def healthcheck() -> dict[str, str]:
        """Simple healthcheck endpoint for smoke-testing the server."""

        return {"status": "ok"}

    app.include_router(books_router, prefix="/api/books", tags=["books"])
    app.include_router(user_router, prefix="/api", tags=["profile"])
    app.include_router(admin_router, prefix="/api/admin", tags=["admin"])

    return app

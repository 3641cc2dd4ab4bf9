"""Error Handlers — global exception handlers mapping every failure to the error envelope.

Invariants:
    - CounterGatewayError → its http_status, {"error": {"message", "details"?}}
    - RequestValidationError (FastAPI/Pydantic) → 400 with field-level details
    - 404/405 (no route for path + method) → 404 {"error": {"message": "Resource not found"}}
    - Exception (catch-all) → 500 "Internal server error", logged with traceback,
      stack traces never sent to the client

Design Decisions:
    - Four-layer handler: domain, validation, HTTP, catch-all
    - Routes never format their own errors — they raise and these handlers respond
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from counter_gateway.api.validation import build_error_details
from counter_gateway.core.errors import CounterGatewayError, RequestValidationFailed

logger = logging.getLogger(__name__)

NOT_FOUND_RESPONSE = {"error": {"message": "Resource not found"}}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_gateway_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_gateway_error_handler(app: FastAPI) -> None:
    """Register counter gateway domain/infrastructure error handler."""

    @app.exception_handler(CounterGatewayError)
    async def gateway_error_handler(request: Request, exc: CounterGatewayError):
        level = logging.WARNING if exc.http_status < 500 else logging.ERROR
        logger.log(
            level,
            f"{type(exc).__name__}: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        error = RequestValidationFailed(
            "Request validation failed", build_error_details(exc.errors()),
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content=error.to_response(),
        )


def _register_http_error_handler(app: FastAPI) -> None:
    """Register handler for routing-level HTTP errors.

    No matching route, or a known path with the wrong method, is a 404.
    """

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (
            status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED,
        ):
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND, content=NOT_FOUND_RESPONSE,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": {"message": str(exc.detail)}},
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — logs full detail, returns a generic message."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "message": "Internal server error",
                    "details": [{"message": str(exc) or type(exc).__name__}],
                },
            },
        )

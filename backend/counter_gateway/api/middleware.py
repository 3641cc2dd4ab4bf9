"""HTTP Middleware — access logging and security headers.

Invariants:
    - Every request produces one access log line (method, path, status, duration)
    - Security headers set with setdefault — a route may override them
"""

import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger("counter_gateway.access")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def register_middleware(app: FastAPI) -> None:
    """Register access logging and security header middleware."""

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        start = time.monotonic()
        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                f"{request.method} {request.url.path} failed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": int((time.monotonic() - start) * 1000),
                },
            )
            raise
        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": int((time.monotonic() - start) * 1000),
            },
        )
        return response

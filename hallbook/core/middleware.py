"""
Core middleware registration for the FastAPI application.

Request ids, timing and error logging for every request.
"""
from __future__ import annotations

import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from hallbook.core.logging import get_logger, profile_id, request_id

logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds a unique request ID to each incoming request.

    The request ID is stored in request.state.request_id, exposed to the
    logging context, and echoed in the X-Request-ID response header.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        req_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = req_id

        req_token = request_id.set(req_id)
        profile_token = profile_id.set(request.headers.get("X-Profile-Id"))
        try:
            response = await call_next(request)
        finally:
            request_id.reset(req_token)
            profile_id.reset(profile_token)

        response.headers[self.header_name] = req_id
        return response


class TimingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that measures and logs request processing time.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        logger.info(
            "Request completed",
            extra={
                "request_id": getattr(request.state, "request_id", "unknown"),
                "method": request.method,
                "url": str(request.url.path),
                "status_code": response.status_code,
                "process_time": f"{process_time:.4f}s",
            }
        )
        return response


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that logs errors and exceptions during request processing.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Request processing failed: {exc}",
                extra={
                    "request_id": getattr(request.state, "request_id", "unknown"),
                    "method": request.method,
                    "url": str(request.url.path),
                    "error_type": type(exc).__name__,
                },
                exc_info=True
            )
            raise

        if response.status_code >= 500:
            logger.warning(
                f"Request returned error status {response.status_code}",
                extra={
                    "request_id": getattr(request.state, "request_id", "unknown"),
                    "method": request.method,
                    "url": str(request.url.path),
                    "status_code": response.status_code,
                }
            )
        return response


def register_middlewares(app: FastAPI) -> None:
    """
    Register all core middlewares to the FastAPI application.

    Middlewares run in reverse order of registration: the request id is
    assigned first, errors are caught outermost.
    """
    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    logger.debug("Core middlewares registered")


__all__ = [
    "RequestIDMiddleware",
    "TimingMiddleware",
    "ErrorLoggingMiddleware",
    "register_middlewares",
]

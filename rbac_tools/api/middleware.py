"""API Middleware for request processing"""

import re
import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from slowapi import Limiter
from slowapi.util import get_remote_address

from rbac_tools.core.config import settings
from rbac_tools.core.logging_config import get_logger
from rbac_tools.core.monitoring import MetricsCollector


# Configure structured logging
logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add unique request ID to each request.

    Reuses an incoming X-Request-ID header when the caller sends one,
    otherwise generates a UUID. The ID is added to:
    - Request state (accessible in route handlers)
    - Response headers (X-Request-ID)
    """

    HEADER = "X-Request-ID"
    # Caller-supplied IDs are only trusted when they look like IDs
    VALID_REQUEST_ID = re.compile(r'^[A-Za-z0-9\-_.]{1,128}$')

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and add request ID"""
        incoming = request.headers.get(self.HEADER, "")
        request_id = incoming if self.VALID_REQUEST_ID.match(incoming) else str(uuid4())

        request.state.request_id = request_id

        response = await call_next(request)

        response.headers[self.HEADER] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all requests and responses with correlation IDs.

    Logs structured information including:
    - Request ID (correlation ID)
    - HTTP method and path
    - Request/response timing
    - Status code

    Every request is also recorded in the HTTP request metrics, labelled
    with the route template rather than the raw path.
    """

    # Patterns for sensitive data redaction
    SENSITIVE_PATTERNS = [
        (re.compile(r'"token"\s*:\s*"[^"]*"'), '"token": "[REDACTED]"'),
        (re.compile(r'"secret"\s*:\s*"[^"]*"'), '"secret": "[REDACTED]"'),
        (re.compile(r'"authorization"\s*:\s*"[^"]*"', re.IGNORECASE), '"authorization": "[REDACTED]"'),
        (re.compile(r'Bearer\s+[A-Za-z0-9\-._~+/]+=*', re.IGNORECASE), 'Bearer [REDACTED]'),
    ]

    # Paths to exclude from detailed logging (health checks, metrics, etc.)
    EXCLUDED_PATHS = {
        "/health",
        "/metrics",
        "/favicon.ico",
        "/robots.txt"
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log details"""
        request_id = getattr(request.state, "request_id", "unknown")

        skip_detailed_logging = (
            request.url.path in self.EXCLUDED_PATHS and
            not settings.LOG_HEALTH_CHECKS
        )

        start_time = time.time()

        if not skip_detailed_logging or settings.DEBUG:
            logger.info(
                "request_started",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                query_params=str(request.query_params),
                client_host=request.client.host if request.client else None,
            )

        try:
            response = await call_next(request)

            response_time = time.time() - start_time
            MetricsCollector.record_http_request(
                request.method,
                self._endpoint_label(request),
                response.status_code,
                response_time
            )

            if not skip_detailed_logging or settings.DEBUG or response.status_code >= 400:
                logger.info(
                    "request_completed",
                    request_id=request_id,
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    response_time_ms=int(response_time * 1000),
                )

            return response

        except Exception as e:
            response_time = time.time() - start_time
            MetricsCollector.record_http_request(
                request.method,
                self._endpoint_label(request),
                500,
                response_time
            )

            # Always log errors, even for health checks
            logger.error(
                "request_failed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                error_message=self._redact_sensitive_data(str(e)),
                response_time_ms=int(response_time * 1000),
                exc_info=True
            )

            # Re-raise to be handled by error handler
            raise

    @staticmethod
    def _endpoint_label(request: Request) -> str:
        route = request.scope.get("route")
        return getattr(route, "path", None) or "unmatched"

    @classmethod
    def _redact_sensitive_data(cls, text: str) -> str:
        """Replace tokens and other secrets with a [REDACTED] placeholder"""
        for pattern, replacement in cls.SENSITIVE_PATTERNS:
            text = pattern.sub(replacement, text)
        return text


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Catches all unhandled exceptions and formats them into
    consistent JSON error responses.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and handle errors"""
        try:
            return await call_next(request)

        except Exception as e:
            request_id = getattr(request.state, "request_id", "unknown")

            logger.error(
                "unhandled_exception",
                request_id=request_id,
                error_type=type(e).__name__,
                error_message=str(e),
                exc_info=True
            )

            # Internal error text is not echoed outside debug mode
            return JSONResponse(
                status_code=500,
                content={
                    "error": {
                        "type": type(e).__name__,
                        "message": str(e) if settings.DEBUG else "Internal server error",
                        "request_id": request_id,
                    }
                }
            )


# Rate limiter instance
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

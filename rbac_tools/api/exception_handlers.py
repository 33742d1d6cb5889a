"""Custom exception handlers for FastAPI application"""

from typing import Union

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from rbac_tools.core.exceptions import (
    InvalidRequirementsError,
    CatalogUnavailableError,
    RoleNotFoundError
)
from rbac_tools.core.logging_config import get_logger


logger = get_logger(__name__)


async def invalid_requirements_exception_handler(
    request: Request,
    exc: InvalidRequirementsError
) -> JSONResponse:
    """
    Handle InvalidRequirementsError exceptions.

    An empty requirement set is a client error, never an empty result.
    """
    logger.warning(
        "invalid_requirements_handled",
        request_path=request.url.path,
        request_method=request.method,
        context=exc.context,
        error_details=exc.details
    )

    return JSONResponse(status_code=400, content=exc.get_api_response())


async def catalog_unavailable_exception_handler(
    request: Request,
    exc: CatalogUnavailableError
) -> JSONResponse:
    """
    Handle CatalogUnavailableError exceptions.

    Logs the full error (including where loading was attempted) but returns
    a response without file-system details.
    """
    logger.error(
        "catalog_unavailable_handled",
        request_path=request.url.path,
        request_method=request.method,
        **exc.to_dict()
    )

    return JSONResponse(
        status_code=503,
        content=exc.get_api_response(),
        headers={"Retry-After": "60"}
    )


async def role_not_found_exception_handler(
    request: Request,
    exc: RoleNotFoundError
) -> JSONResponse:
    """Handle RoleNotFoundError exceptions."""
    logger.info(
        "role_not_found_handled",
        request_path=request.url.path,
        role_id=exc.role_id,
        system=exc.system
    )

    return JSONResponse(status_code=404, content=exc.get_api_response())


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError]
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Provides field-level error information for validation failures.
    """
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        }
        for error in exc.errors()
    ]

    logger.warning(
        "validation_error_handled",
        request_path=request.url.path,
        request_method=request.method,
        errors=errors
    )

    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "type": "validation_error",
            "errors": errors,
            "request_id": getattr(request.state, "request_id", "unknown")
        }
    )


def register_exception_handlers(app):
    """
    Register all custom exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(InvalidRequirementsError, invalid_requirements_exception_handler)
    app.add_exception_handler(CatalogUnavailableError, catalog_unavailable_exception_handler)
    app.add_exception_handler(RoleNotFoundError, role_not_found_exception_handler)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)

    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    logger.info(
        "exception_handlers_registered",
        handlers=[
            "InvalidRequirementsError",
            "CatalogUnavailableError",
            "RoleNotFoundError",
            "RequestValidationError",
            "ValidationError",
            "RateLimitExceeded"
        ]
    )

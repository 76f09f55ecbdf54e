from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from aggregator_service.core.exceptions import (
    APIException,
    NotFoundError,
    ValidationException,
)
from aggregator_service.core.logging import get_logger

# Initialize logger
logger = get_logger(__name__)


async def handle_api_exception(request: Request, exc: APIException) -> JSONResponse:
    """
    Handle APIException instances.

    Args:
        request: FastAPI request object
        exc: APIException instance

    Returns:
        JSONResponse: Formatted error response
    """
    logger.error(
        f"API Exception: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "error_code": exc.code,
            "context": exc.context
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def handle_validation_exception(request: Request, exc: ValidationException) -> JSONResponse:
    """Handle validation errors raised by the service layer."""
    logger.warning(
        f"Validation error: {exc.detail}",
        extra={
            "field": exc.context.get("field") if exc.context else None,
            "context": exc.context
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def handle_not_found_exception(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle resource not found errors."""
    logger.info(
        f"Resource not found: {exc.detail}",
        extra={
            "resource_type": exc.context.get("resource_type"),
            "resource_id": exc.context.get("resource_id")
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body and parameter validation errors."""
    errors = []
    for error in exc.errors():
        errors.append({
            "loc": list(error["loc"]),
            "msg": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": "validation_error",
                "message": "Request validation error",
                "status_code": status.HTTP_422_UNPROCESSABLE_ENTITY,
                "context": {
                    "errors": errors
                }
            }
        }
    )


async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred",
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR
            }
        }
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Configure global exception handlers for the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(NotFoundError, handle_not_found_exception)
    app.add_exception_handler(ValidationException, handle_validation_exception)
    app.add_exception_handler(APIException, handle_api_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_exception)

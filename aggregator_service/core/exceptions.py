from fastapi import status
from typing import Any, Dict, Optional, Union


class APIException(Exception):
    """
    Base exception for API errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        code: str = "internal_error",
        context: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.detail = detail
        self.code = code
        self.context = context or {}
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for consistent response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.detail,
                "status_code": self.status_code,
                "context": self.context
            }
        }


class IntegrationException(APIException):
    """Exception raised when an external API integration fails."""

    def __init__(
        self,
        detail: str = "External API integration error",
        code: str = "integration_error",
        status_code: int = status.HTTP_502_BAD_GATEWAY,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(status_code=status_code, detail=detail, code=code, context=context)
        self.original_exception = original_exception

        # Add original exception info to context if available
        if original_exception and self.context is not None:
            self.context["original_error"] = str(original_exception)


class UpstreamUnavailable(IntegrationException):
    """
    An upstream page or detail request failed.

    Raised for non-success statuses, transport errors and undecodable bodies.
    Pagination absorbs it and keeps what was collected before the failure.
    """

    def __init__(
        self,
        url: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        if detail is None:
            if status_code is not None:
                detail = f"Upstream returned HTTP {status_code}"
            else:
                detail = "Upstream request failed"

        super().__init__(
            detail=detail,
            code="upstream_unavailable",
            context={"url": url, "upstream_status": status_code},
            original_exception=original_exception
        )
        self.url = url
        self.upstream_status = status_code


class ValidationException(APIException):
    """Exception raised when data validation fails."""

    def __init__(
        self,
        detail: str = "Validation error",
        code: str = "validation_error",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        merged_context = {"field": field} if field else {}
        if context:
            merged_context.update(context)

        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            code=code,
            context=merged_context
        )


class NotFoundError(APIException):
    """Exception raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Union[str, int],
        detail: Optional[str] = None,
        code: str = "not_found_error",
        context: Optional[Dict[str, Any]] = None
    ):
        if detail is None:
            detail = f"{resource_type} with id '{resource_id}' not found"

        merged_context = {
            "resource_type": resource_type,
            "resource_id": str(resource_id)
        }
        if context:
            merged_context.update(context)

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            code=code,
            context=merged_context
        )


class AggregationError(APIException):
    """Unexpected failure while building an aggregated collection."""

    def __init__(
        self,
        subject: str,
        detail: str = "Failed to aggregate collection",
        original_exception: Optional[Exception] = None
    ):
        context = {"subject": subject}
        if original_exception:
            context["original_error"] = str(original_exception)

        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            code="aggregation_error",
            context=context
        )
        self.original_exception = original_exception


class CacheError(APIException):
    """Exception raised when the cache persistence backend fails."""

    def __init__(
        self,
        detail: str = "Cache error",
        code: str = "cache_error",
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            code=code,
            context=context
        )

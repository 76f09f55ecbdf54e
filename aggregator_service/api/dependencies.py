from fastapi import Path, Request

from aggregator_service.core.exceptions import ValidationException
from aggregator_service.core.logging import get_logger
from aggregator_service.services.catalog_service import CatalogService

# Initialize logger
logger = get_logger(__name__)


async def get_catalog_service(request: Request) -> CatalogService:
    """
    Dependency for providing the catalog service built at application start.

    Args:
        request: Incoming request

    Returns:
        CatalogService: The process-wide catalog service
    """
    return request.app.state.catalog_service


async def get_subject(subject: str = Path(..., description="Subject whose collection is requested")) -> str:
    """
    Extract and normalize the subject path parameter.

    Raises:
        ValidationException: If the subject is blank
    """
    subject = subject.strip()
    if not subject:
        logger.warning("Empty subject provided")
        raise ValidationException(detail="Subject cannot be empty", field="subject")
    return subject

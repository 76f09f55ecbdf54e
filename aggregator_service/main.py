from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import time
import uuid
from contextlib import asynccontextmanager
from typing import Callable, Optional

from aggregator_service.api.error_handlers import register_exception_handlers
from aggregator_service.core.config import Settings, get_settings, load_env_file
from aggregator_service.core.logging import configure_logging, get_logger, set_correlation_id
from aggregator_service.services.catalog_service import CatalogService


# Load environment variables and configure logging early
load_env_file()
configure_logging()
logger = get_logger(__name__)


def create_application(
    settings: Optional[Settings] = None,
    catalog_service: Optional[CatalogService] = None
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the environment-derived ones
        catalog_service: Pre-built service, mainly for tests

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = settings or get_settings()

    if catalog_service is None:
        from aggregator_service.adapters.factory import create_catalog_service
        catalog_service = create_catalog_service(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting up Aggregator Service")
        loaded = catalog_service.load_cache()
        logger.info(f"Cache ready with {loaded} persisted entries")
        yield
        logger.info("Shutting down Aggregator Service")
        await catalog_service.close()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        lifespan=lifespan,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url=f"{settings.API_V1_STR}/docs",
        redoc_url=f"{settings.API_V1_STR}/redoc",
        debug=settings.DEBUG
    )
    app.state.catalog_service = catalog_service

    configure_middleware(app, settings)
    register_exception_handlers(app)
    register_routers(app, settings)

    return app


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Configure middleware components for the FastAPI application.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request tracking middleware
    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next: Callable):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        set_correlation_id(correlation_id)

        start_time = time.time()

        try:
            response = await call_next(request)

            response.headers["X-Correlation-ID"] = correlation_id

            process_time = time.time() - start_time
            logger.info(
                "Request completed",
                extra={
                    "request_path": request.url.path,
                    "method": request.method,
                    "status_code": response.status_code,
                    "process_time_ms": round(process_time * 1000, 2)
                }
            )

            return response
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {str(e)}",
                extra={
                    "request_path": request.url.path,
                    "method": request.method,
                    "process_time_ms": round(process_time * 1000, 2),
                    "error": str(e)
                },
                exc_info=True
            )
            raise


def register_routers(app: FastAPI, settings: Settings) -> None:
    """
    Register API routers with the FastAPI application.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """
    # Import routers here to avoid circular imports
    from aggregator_service.api.routes.health import health_router
    from aggregator_service.api.routes.subjects import subjects_router

    app.include_router(
        health_router,
        prefix=f"{settings.API_V1_STR}/health",
        tags=["Health"]
    )

    app.include_router(
        subjects_router,
        prefix=f"{settings.API_V1_STR}/subjects",
        tags=["Subjects"]
    )


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("aggregator_service.main:app", host="0.0.0.0", port=8000, reload=True)

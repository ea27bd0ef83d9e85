import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from txnflow.api.middleware.error_handler import (
    handle_generic_error,
    handle_ingestion_error,
    handle_integrity_error,
    handle_validation_error,
)
from txnflow.api.middleware.logging import RequestLoggingMiddleware, configure_logging
from txnflow.api.v1 import router as v1_router
from txnflow.api.v1.health import router as health_router
from txnflow.config import settings
from txnflow.core.exceptions import IngestionError
from txnflow.db.session import async_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting txnflow", extra={"app_env": settings.app_env})
    yield
    # Shutdown
    await async_engine.dispose()


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="txnflow API",
        description="Transaction ingestion, categorization and automation rules",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Register exception handlers (order matters - most specific first)
    app.add_exception_handler(IngestionError, handle_ingestion_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_generic_error)

    # Register routers
    app.include_router(health_router)
    app.include_router(v1_router)

    return app


app = create_app()


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(
        "txnflow.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=settings.app_env.lower() == "development" and settings.debug,
    )


if __name__ == "__main__":
    run()

"""
FastAPI application factory.

Creates and configures the main application instance.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockledger import __version__
from stockledger.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from stockledger.api.middleware.error_handler import setup_exception_handlers
from stockledger.api.routes import (
    config_router,
    health_router,
    kardex_router,
    pending_router,
    products_router,
    purchases_router,
    sales_router,
    stock_router,
)
from stockledger.config import configure_logging, get_logger, get_settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Loads the ledger snapshot on startup and releases storage on shutdown.
    """
    configure_logging()
    settings = get_settings()

    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        storage_backend=settings.storage.backend,
    )

    from stockledger.application.services import get_ledger_service, reset_ledger_service
    from stockledger.infrastructure.storage import close_snapshot_store

    try:
        summary = await get_ledger_service().read(lambda ctx: ctx.store.summary())
        logger.info("ledger_ready", products=summary.total_products)
    except Exception as e:
        logger.error("ledger_init_failed", error=str(e))
        raise

    logger.info("application_started")

    yield

    logger.info("application_stopping")
    try:
        await close_snapshot_store()
        logger.info("snapshot_store_closed")
    except Exception as e:
        logger.warning("snapshot_store_close_failed", error=str(e))
    reset_ledger_service()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Stock Ledger API",
        description="Inventory ledger with lot costing and document reconciliation",
        version=__version__,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(products_router)
    app.include_router(stock_router)
    app.include_router(purchases_router)
    app.include_router(sales_router)
    app.include_router(pending_router)
    app.include_router(kardex_router)
    app.include_router(config_router)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "stockledger.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )

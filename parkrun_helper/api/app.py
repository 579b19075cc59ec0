"""FastAPI application for parkrun-helper."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import logging
import sys
import os

from parkrun_helper._storage import StorageFactory
from parkrun_helper.auth import TokenVerifier
from parkrun_helper.backup import BackupManager
from parkrun_helper.backup.scheduler import BackupScheduler
from parkrun_helper.config import AppConfig
from .config import settings
from .exceptions import register_exception_handlers
from .metrics import MetricsMiddleware, PrometheusMetrics
from .middleware import CorrelationIdMiddleware
from .routers import backup, health, helpers, metrics, secure

# App-managed logging: attach our own stdout handler and don't propagate,
# so INFO logs are visible regardless of uvicorn's logging config
app_logger = logging.getLogger("parkrun-helper")
app_logger.setLevel(logging.INFO)
app_logger.propagate = False
app_logger.handlers.clear()

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)
formatter = logging.Formatter(
    '%(asctime)s - [%(name)s] - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
console_handler.setFormatter(formatter)
app_logger.addHandler(console_handler)

# Fall back to server-managed logging
if os.getenv("DISABLE_APP_LOGGING", "false").lower() == "true":
    app_logger.handlers.clear()
    app_logger.propagate = True

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Application config; read from the environment at startup when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Wire the document store, token verifier and backup services."""
        app_config = config or AppConfig.from_env()
        logger.info(f"Initializing document store backend: {app_config.cosmos.backend}")

        store = StorageFactory.create_document_store(app_config.cosmos)
        backup_manager = BackupManager(store, app_config.backup.directory)
        scheduler = BackupScheduler(backup_manager, app_config.backup)

        app.state.config = app_config
        app.state.store = store
        app.state.token_verifier = TokenVerifier.from_config(app_config.auth)
        app.state.backup_manager = backup_manager
        app.state.backup_scheduler = scheduler

        if app_config.backup.automated_backups_enabled:
            scheduler.start()
        else:
            logger.info("Automated backups disabled; scheduler not started")

        yield

        logger.info("Shutting down parkrun-helper...")
        scheduler.shutdown()
        await store.close()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    app.state.metrics = PrometheusMetrics()
    app.add_middleware(MetricsMiddleware, metrics=app.state.metrics)

    register_exception_handlers(app)

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(helpers.router, prefix=settings.api_prefix)
    app.include_router(backup.router, prefix=settings.api_prefix)
    app.include_router(secure.router, prefix=settings.api_prefix)
    app.include_router(metrics.router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "docs": f"{settings.api_prefix}/docs"
        }

    return app


# Create default app instance
app = create_app()

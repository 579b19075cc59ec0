"""Dependency injection for FastAPI."""

from fastapi import Request
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from parkrun_helper.auth import TokenVerifier
    from parkrun_helper.backup import BackupManager
    from parkrun_helper.base import BaseDocumentStore
    from parkrun_helper.config import AppConfig
    from .metrics import PrometheusMetrics


async def get_config(request: Request) -> "AppConfig":
    """Get application config from app state."""
    return request.app.state.config


async def get_store(request: Request) -> "BaseDocumentStore":
    """Get document store from app state."""
    return request.app.state.store


async def get_backup_manager(request: Request) -> "BackupManager":
    """Get BackupManager instance from app state."""
    return request.app.state.backup_manager


async def get_token_verifier(request: Request) -> "TokenVerifier":
    """Get TokenVerifier instance from app state."""
    return request.app.state.token_verifier


async def get_metrics(request: Request) -> "PrometheusMetrics":
    """Get PrometheusMetrics instance from app state."""
    return request.app.state.metrics

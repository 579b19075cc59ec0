"""Snapshot backup and restore for the document store."""

from .catalog import BackupCatalog
from .manager import BackupManager, DEFAULT_CONTAINERS
from .models import (
    BackupCatalogEntry,
    BackupFormat,
    BackupKind,
    BackupManifest,
    BackupOptions,
    BackupResult,
    CleanupResult,
    RestoreResult,
)

__all__ = [
    "BackupCatalog",
    "BackupManager",
    "DEFAULT_CONTAINERS",
    "BackupCatalogEntry",
    "BackupFormat",
    "BackupKind",
    "BackupManifest",
    "BackupOptions",
    "BackupResult",
    "CleanupResult",
    "RestoreResult",
]

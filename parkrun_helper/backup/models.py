"""Data models for backup/restore operations."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BackupKind(str, Enum):
    FULL = "full"
    INCREMENTAL = "incremental"


class BackupFormat(str, Enum):
    JSON = "json"
    NDJSON = "ndjson"


class BackupOptions(BaseModel):
    """Options controlling a single backup run."""

    model_config = ConfigDict(populate_by_name=True)

    include_metadata: bool = Field(default=True, alias="includeMetadata")
    compress: bool = True
    format: BackupFormat = BackupFormat.JSON
    batch_size: int = Field(default=1000, gt=0, alias="batchSize")


class BackupManifest(BaseModel):
    """Snapshot file header, stored under the ``metadata`` key."""

    model_config = ConfigDict(populate_by_name=True)

    backup_id: str = Field(..., alias="backupId", description="Unique backup identifier")
    timestamp: str = Field(..., description="Backup start time, ISO-8601")
    type: BackupKind
    since: Optional[str] = Field(default=None, description="Incremental cutoff, ISO-8601")
    version: str = Field(default="1.0.0", description="Snapshot schema version")
    format: BackupFormat = BackupFormat.JSON


class BackupResult(BaseModel):
    """Outcome of a backup run."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    backup_id: str = Field(..., alias="backupId")
    timestamp: str
    file_path: Optional[str] = Field(default=None, alias="filePath")
    file_size: Optional[int] = Field(default=None, alias="fileSize")
    record_count: Optional[int] = Field(default=None, alias="recordCount")
    duration: Optional[int] = Field(default=None, description="Run duration in milliseconds")
    error: Optional[str] = None


class BackupCatalogEntry(BaseModel):
    """Backup file on disk; derived from a directory listing."""

    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., alias="fileName")
    file_path: str = Field(..., alias="filePath")
    size: int
    created: datetime
    modified: datetime
    type: BackupKind


class RestoreResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    records_restored: Optional[int] = Field(default=None, alias="recordsRestored")
    found: bool = Field(default=True, exclude=True)


class CleanupResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    deleted_count: int = Field(..., alias="deletedCount")
    message: str

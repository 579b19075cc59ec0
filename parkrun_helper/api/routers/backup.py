"""Backup and restore API endpoints."""

from datetime import datetime
from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from typing import Any, List, Optional

from ..auth import require_identity
from ..dependencies import get_backup_manager, get_config
from ..exceptions import BackupNotFoundError, InvalidDateError
from ..models import IncrementalBackupRequest
from ...backup import BackupCatalogEntry, BackupManager, BackupOptions, BackupResult, CleanupResult, RestoreResult
from ...config import AppConfig
from ..._utils import ensure_utc, logger

router = APIRouter(prefix="/backup", tags=["backup"], dependencies=[Depends(require_identity)])


def parse_since(value: Any) -> datetime:
    """Parse an ISO-8601 instant; a trailing ``Z`` means UTC."""
    if not value or not isinstance(value, str):
        raise InvalidDateError(value)
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise InvalidDateError(value)
    return ensure_utc(parsed)


def _backup_response(result: BackupResult) -> JSONResponse:
    status_code = 201 if result.success else 500
    return JSONResponse(status_code=status_code, content=result.model_dump(by_alias=True, exclude_none=True))


@router.post("/full", response_model=BackupResult, status_code=201)
async def create_full_backup(
    options: Optional[BackupOptions] = Body(default=None),
    backup_manager: BackupManager = Depends(get_backup_manager),
):
    """Create a full backup of all containers.

    A failed run still returns the BackupResult body, with status 500.
    """
    result = await backup_manager.create_full_backup(options or BackupOptions())
    return _backup_response(result)


@router.post("/incremental", response_model=BackupResult, status_code=201)
async def create_incremental_backup(
    body: IncrementalBackupRequest,
    backup_manager: BackupManager = Depends(get_backup_manager),
):
    """Create a backup of documents changed at or after ``since``."""
    since = parse_since(body.since)
    options = BackupOptions(**body.model_dump(exclude={"since"}))
    result = await backup_manager.create_incremental_backup(since, options)
    return _backup_response(result)


@router.get("/list", response_model=List[BackupCatalogEntry])
async def list_backups(backup_manager: BackupManager = Depends(get_backup_manager)) -> List[BackupCatalogEntry]:
    """List all available backup files, newest first."""
    return await backup_manager.list_backups()


@router.post("/restore/{backup_id}", response_model=RestoreResult)
async def restore_from_backup(
    backup_id: str,
    container: Optional[str] = Query(default=None, description="Restore only this container"),
    backup_manager: BackupManager = Depends(get_backup_manager),
):
    """Restore data from a backup by upserting its records."""
    result = await backup_manager.restore_from_backup(backup_id, container)
    if not result.found:
        raise BackupNotFoundError(result.message)
    if not result.success:
        return JSONResponse(status_code=500, content=result.model_dump(by_alias=True, exclude_none=True))
    return result


@router.delete("/cleanup", response_model=CleanupResult)
async def cleanup_old_backups(
    retention_days: Optional[int] = Query(default=None, alias="retentionDays", ge=0),
    backup_manager: BackupManager = Depends(get_backup_manager),
    config: AppConfig = Depends(get_config),
) -> CleanupResult:
    """Delete backup files older than the retention period."""
    days = retention_days if retention_days is not None else config.backup.retention_days
    deleted_count = await backup_manager.delete_old_backups(days)
    logger.info(f"Manual backup cleanup removed {deleted_count} files older than {days} days")
    return CleanupResult(
        deleted_count=deleted_count,
        message=f"Deleted {deleted_count} backup files older than {days} days",
    )

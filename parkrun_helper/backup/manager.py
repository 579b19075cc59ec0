"""Backup and restore orchestration for the document store."""

import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..base import BaseDocumentStore
from .._utils import ensure_utc, logger, to_iso, utc_now
from .catalog import BackupCatalog
from .exporters import ContainerExporter
from .models import (
    BackupCatalogEntry,
    BackupKind,
    BackupManifest,
    BackupOptions,
    BackupResult,
    RestoreResult,
)
from .utils import backup_file_name, generate_backup_id, read_snapshot, write_snapshot

DEFAULT_CONTAINERS = ("helpers", "schedules")


class BackupManager:
    """Orchestrate snapshot, catalog and restore operations."""

    def __init__(
        self,
        store: BaseDocumentStore,
        backup_dir: str = "./backups",
        containers: Sequence[str] = DEFAULT_CONTAINERS,
        now: Callable[[], datetime] = utc_now,
    ):
        """Initialize backup manager.

        Args:
            store: Document store to back up and restore into
            backup_dir: Directory for snapshot files
            containers: Container names included in every backup
            now: Clock used for backup ids, timestamps and retention
        """
        self.store = store
        self.backup_dir = Path(backup_dir)
        if not self.backup_dir.exists():
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created backup directory: {self.backup_dir}")
        self.containers = tuple(containers)
        self._now = now
        self.catalog = BackupCatalog(self.backup_dir, now=now)
        self.exporter = ContainerExporter(store)

    async def create_full_backup(self, options: Optional[BackupOptions] = None) -> BackupResult:
        """Snapshot every container."""
        return await self._create_backup(BackupKind.FULL, options or BackupOptions())

    async def create_incremental_backup(
        self,
        since: datetime,
        options: Optional[BackupOptions] = None,
    ) -> BackupResult:
        """Snapshot documents modified at or after ``since``."""
        return await self._create_backup(BackupKind.INCREMENTAL, options or BackupOptions(), ensure_utc(since))

    async def list_backups(self) -> List[BackupCatalogEntry]:
        return await self.catalog.list_backups()

    async def delete_old_backups(self, retention_days: int = 30) -> int:
        return await self.catalog.delete_older_than(retention_days)

    async def restore_from_backup(self, backup_id: str, container: Optional[str] = None) -> RestoreResult:
        """Replay a snapshot into the live containers by upsert.

        Args:
            backup_id: Backup ID (or a unique fragment of its file name)
            container: Restore only this container

        Returns:
            RestoreResult; ``success`` is False only when the backup cannot
            be located, read or parsed
        """
        entry = await self.catalog.find(backup_id)
        if entry is None:
            return RestoreResult(success=False, message=f"Backup with ID {backup_id} not found", found=False)

        logger.info(f"Starting restore from backup: {entry.file_name}")

        try:
            snapshot = await read_snapshot(Path(entry.file_path))
        except Exception as e:
            logger.error(f"Restore failed for backup {backup_id}: {e}")
            return RestoreResult(success=False, message=f"Failed to read backup {backup_id}: {e}")

        stored: Dict[str, Any] = snapshot["containers"]
        names = [container] if container else list(stored.keys())

        records_restored = 0
        records_failed = 0
        for name in names:
            records = stored.get(name)
            if records is None:
                logger.warning(f"Backup {backup_id} has no data for container: {name}")
                continue
            if not isinstance(records, list):
                logger.warning(f"Skipping container {name}: it failed during backup")
                continue

            restored, failed = await self.exporter.restore(name, records)
            records_restored += restored
            records_failed += failed

        logger.info(f"Restore completed: {records_restored} records restored, {records_failed} failed")

        return RestoreResult(
            success=True,
            message=f"Successfully restored {records_restored} records from backup {backup_id}",
            records_restored=records_restored,
        )

    async def _create_backup(
        self,
        kind: BackupKind,
        options: BackupOptions,
        since: Optional[datetime] = None,
    ) -> BackupResult:
        started = time.perf_counter()
        started_at = self._now()
        backup_id = generate_backup_id(kind, started_at)
        timestamp = to_iso(started_at)

        if since is not None:
            logger.info(f"Starting {kind.value} backup since {to_iso(since)}: {backup_id}")
        else:
            logger.info(f"Starting {kind.value} backup: {backup_id}")

        try:
            manifest = BackupManifest(
                backup_id=backup_id,
                timestamp=timestamp,
                type=kind,
                since=to_iso(since) if since is not None else None,
                format=options.format,
            )

            containers: Dict[str, Any] = {}
            total_records = 0
            for name in self.containers:
                try:
                    records = await self.exporter.export(
                        name,
                        batch_size=options.batch_size,
                        since=since,
                        include_metadata=options.include_metadata,
                    )
                    containers[name] = records
                    total_records += len(records)
                    logger.info(f"Backed up {len(records)} records from {name}")
                except Exception as e:
                    logger.error(f"Failed to backup container {name}: {e}")
                    containers[name] = {"error": str(e)}

            file_path = self.backup_dir / backup_file_name(backup_id, options.compress)
            file_size = await write_snapshot(
                {"metadata": manifest.model_dump(by_alias=True, exclude_none=True, mode="json"), "containers": containers},
                file_path,
                options.compress,
            )

            duration = int((time.perf_counter() - started) * 1000)
            logger.info(f"Backup completed: {backup_id}, {total_records} records, {file_size} bytes, {duration}ms")

            return BackupResult(
                success=True,
                backup_id=backup_id,
                timestamp=timestamp,
                file_path=str(file_path),
                file_size=file_size,
                record_count=total_records,
                duration=duration,
            )

        except Exception as e:
            duration = int((time.perf_counter() - started) * 1000)
            logger.error(f"Backup failed: {backup_id}: {e}")
            return BackupResult(
                success=False,
                backup_id=backup_id,
                timestamp=timestamp,
                duration=duration,
                error=str(e),
            )

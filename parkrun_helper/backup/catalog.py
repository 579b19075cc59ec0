"""Backup file catalog and retention pruning."""

import asyncio
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List, Optional

from .._utils import logger, utc_now
from .models import BackupCatalogEntry
from .utils import classify_backup_file, creation_time_from_name


class BackupCatalog:
    """Index of snapshot files in the backup directory.

    Entries are rebuilt from the directory listing on every call; nothing is
    stored besides the files themselves.
    """

    def __init__(self, backup_dir: Path, now: Callable[[], datetime] = utc_now):
        self.backup_dir = Path(backup_dir)
        self._now = now

    def _scan(self) -> List[BackupCatalogEntry]:
        entries = []
        for path in self.backup_dir.iterdir():
            kind = classify_backup_file(path.name)
            if kind is None or not path.is_file():
                continue

            stat = path.stat()
            modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
            created = creation_time_from_name(path.name) or datetime.fromtimestamp(
                getattr(stat, "st_birthtime", stat.st_mtime), tz=timezone.utc
            )

            entries.append(BackupCatalogEntry(
                file_name=path.name,
                file_path=str(path),
                size=stat.st_size,
                created=created,
                modified=modified,
                type=kind,
            ))

        entries.sort(key=lambda e: e.created, reverse=True)
        return entries

    async def list_backups(self) -> List[BackupCatalogEntry]:
        """List backup files, newest first.

        Returns an empty list if the directory cannot be read.
        """
        try:
            return await asyncio.to_thread(self._scan)
        except OSError as e:
            logger.error(f"Failed to list backups in {self.backup_dir}: {e}")
            return []

    async def find(self, backup_id: str) -> Optional[BackupCatalogEntry]:
        """Locate a backup by id.

        An exact ``<id>.json[.gz]`` match wins; otherwise the newest file whose
        name contains ``backup_id``.
        """
        backups = await self.list_backups()
        for entry in backups:
            if entry.file_name.split(".", 1)[0] == backup_id:
                return entry
        for entry in backups:
            if backup_id in entry.file_name:
                return entry
        return None

    async def delete_older_than(self, retention_days: int) -> int:
        """Delete backups created more than ``retention_days`` ago.

        Per-file failures are logged and skipped.

        Returns:
            Number of files actually deleted
        """
        cutoff = self._now() - timedelta(days=retention_days)
        deleted_count = 0

        for entry in await self.list_backups():
            if entry.created >= cutoff:
                continue
            try:
                await asyncio.to_thread(Path(entry.file_path).unlink)
                deleted_count += 1
                logger.info(f"Deleted old backup: {entry.file_name}")
            except OSError as e:
                logger.error(f"Failed to delete backup {entry.file_name}: {e}")

        logger.info(f"Deleted {deleted_count} old backups (older than {retention_days} days)")
        return deleted_count

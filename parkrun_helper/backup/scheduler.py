"""Cron-driven automated backup tasks."""

from datetime import timedelta
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .._utils import logger, utc_now
from ..config import BackupConfig
from .manager import BackupManager
from .models import BackupKind, BackupOptions


class BackupScheduler:
    """Run backups and retention pruning on fixed UTC calendar schedules.

    Handlers never raise: a failed run is logged and the next scheduled run
    is the retry.
    """

    def __init__(
        self,
        backup_manager: BackupManager,
        config: BackupConfig,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.backup_manager = backup_manager
        self.config = config
        self.scheduler = scheduler or AsyncIOScheduler(timezone="UTC")

    def setup(self) -> None:
        """Register all cron jobs, replacing any previous registration."""
        jobs = [
            (self.handle_daily_full_backup, CronTrigger(hour=2, minute=0, timezone="UTC"),
             "daily-full-backup", "Daily full backup"),
            (self.handle_hourly_incremental_backup,
             CronTrigger(day_of_week="mon-fri", hour="9-18", minute=0, timezone="UTC"),
             "hourly-incremental-backup", "Hourly incremental backup"),
            (self.handle_weekly_backup_cleanup, CronTrigger(day_of_week="sun", hour=3, minute=0, timezone="UTC"),
             "weekly-backup-cleanup", "Weekly backup cleanup"),
            (self.handle_monthly_verification_backup, CronTrigger(day=1, hour=4, minute=0, timezone="UTC"),
             "monthly-verification-backup", "Monthly verification backup"),
        ]

        for func, trigger, job_id, name in jobs:
            self.scheduler.add_job(
                func,
                trigger,
                id=job_id,
                name=name,
                replace_existing=True,
                misfire_grace_time=600,
            )
            logger.info(f"Scheduled {job_id}: {trigger}")

    def start(self) -> None:
        self.setup()
        self.scheduler.start()
        logger.info("Backup scheduler started")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Backup scheduler stopped")

    def is_backup_enabled(self) -> bool:
        return self.config.automated_backups_enabled

    async def handle_daily_full_backup(self) -> None:
        if not self.is_backup_enabled():
            logger.debug("Backup is disabled, skipping daily full backup")
            return

        logger.info("Starting scheduled daily full backup")
        try:
            result = await self.backup_manager.create_full_backup(BackupOptions(batch_size=1000))
            if result.success:
                logger.info(
                    f"Daily full backup completed successfully: {result.backup_id}, "
                    f"{result.record_count} records, {result.file_size} bytes"
                )
            else:
                logger.error(f"Daily full backup failed: {result.error}")
        except Exception as e:
            logger.error(f"Daily full backup encountered an error: {e}")

    async def handle_hourly_incremental_backup(self) -> None:
        if not self.is_backup_enabled():
            logger.debug("Backup is disabled, skipping hourly incremental backup")
            return

        logger.info("Starting scheduled hourly incremental backup")
        try:
            since = utc_now() - timedelta(hours=1)
            result = await self.backup_manager.create_incremental_backup(since, BackupOptions(batch_size=500))
            if result.success:
                logger.info(
                    f"Hourly incremental backup completed: {result.backup_id}, "
                    f"{result.record_count} records, {result.file_size} bytes"
                )
            else:
                logger.error(f"Hourly incremental backup failed: {result.error}")
        except Exception as e:
            logger.error(f"Hourly incremental backup encountered an error: {e}")

    async def handle_weekly_backup_cleanup(self) -> None:
        if not self.is_backup_enabled():
            logger.debug("Backup is disabled, skipping weekly cleanup")
            return

        logger.info("Starting scheduled weekly backup cleanup")
        try:
            deleted_count = await self.backup_manager.delete_old_backups(self.config.retention_days)
            logger.info(f"Weekly backup cleanup completed: deleted {deleted_count} old backup files")
        except Exception as e:
            logger.error(f"Weekly backup cleanup encountered an error: {e}")

    async def handle_monthly_verification_backup(self) -> None:
        if not self.is_backup_enabled():
            logger.debug("Backup is disabled, skipping monthly verification backup")
            return

        logger.info("Starting scheduled monthly verification backup")
        try:
            result = await self.backup_manager.create_full_backup(BackupOptions(batch_size=2000))
            if not result.success:
                logger.error(f"Monthly verification backup failed: {result.error}")
                return

            logger.info(
                f"Monthly verification backup completed: {result.backup_id}, "
                f"{result.record_count} records, {result.file_size} bytes"
            )

            backups = await self.backup_manager.list_backups()
            full = sum(1 for b in backups if b.type == BackupKind.FULL)
            incremental = sum(1 for b in backups if b.type == BackupKind.INCREMENTAL)
            total_mb = round(sum(b.size for b in backups) / 1024 / 1024)
            logger.info(f"Backup directory contains {len(backups)} backup files")
            logger.info(f"Backup statistics: {full} full, {incremental} incremental, {total_mb}MB total")
        except Exception as e:
            logger.error(f"Monthly verification backup encountered an error: {e}")

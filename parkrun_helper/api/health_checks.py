"""Dependency checks behind the health endpoints.

Each check returns an ``IndicatorResult`` and never raises; a failure is
reported as ``healthy=False`` with the error in ``details``.
"""

import asyncio
import os
import shutil
import time
from pathlib import Path

import httpx

from ..base import BaseDocumentStore
from ..config import AppConfig, AuthConfig
from .._utils import logger
from .models import IndicatorResult

AZURE_AD_TIMEOUT = 5.0
DISK_USAGE_THRESHOLD = 0.9


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


async def check_database(store: BaseDocumentStore, name: str = "database") -> IndicatorResult:
    """Round-trip to the document store."""
    start = time.perf_counter()
    try:
        healthy = await store.check_health()
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return IndicatorResult(name=name, healthy=False, response_time=_elapsed_ms(start), details={"error": str(e)})
    return IndicatorResult(name=name, healthy=bool(healthy), response_time=_elapsed_ms(start))


async def check_azure_ad(config: AuthConfig, name: str = "azure_ad", timeout: float = AZURE_AD_TIMEOUT) -> IndicatorResult:
    """Fetch the tenant's OpenID configuration and expect an issuer in it."""
    endpoint = config.openid_configuration_url
    start = time.perf_counter()
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(endpoint)
        document = response.json() if response.status_code == 200 else {}
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Azure AD health check failed: {e}")
        return IndicatorResult(
            name=name,
            healthy=False,
            response_time=_elapsed_ms(start),
            details={"endpoint": endpoint, "error": str(e) or type(e).__name__},
        )

    issuer = document.get("issuer") if isinstance(document, dict) else None
    return IndicatorResult(
        name=name,
        healthy=bool(issuer),
        response_time=_elapsed_ms(start),
        details={"endpoint": endpoint, "status": response.status_code, "issuer": issuer},
    )


async def check_backup_storage(
    directory: str, name: str = "storage", threshold: float = DISK_USAGE_THRESHOLD
) -> IndicatorResult:
    """Disk holding the backup directory is below ``threshold`` full."""
    start = time.perf_counter()
    try:
        usage = await asyncio.to_thread(shutil.disk_usage, directory)
    except OSError as e:
        return IndicatorResult(name=name, healthy=False, response_time=_elapsed_ms(start), details={"error": str(e)})

    used = usage.used / usage.total if usage.total else 1.0
    return IndicatorResult(
        name=name,
        healthy=used < threshold,
        response_time=_elapsed_ms(start),
        details={"path": directory, "usedPercent": round(used * 100, 1), "thresholdPercent": int(threshold * 100)},
    )


async def check_startup_requirements(config: AppConfig, name: str = "startup") -> IndicatorResult:
    """Backup directory exists and is writable."""
    directory = Path(config.backup.directory)
    writable = directory.is_dir() and os.access(directory, os.W_OK)
    details = {"backupDirectory": str(directory), "backupDirectoryWritable": writable}
    return IndicatorResult(name=name, healthy=writable, details=details)

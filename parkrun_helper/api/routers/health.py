"""Health check endpoints."""

import asyncio
import os
import platform
import sys
import time
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from typing import Any, Dict, List

from ..config import settings
from ..dependencies import get_config, get_store
from ..health_checks import check_azure_ad, check_backup_storage, check_database, check_startup_requirements
from ..models import DetailedHealthReport, HealthReport, HealthStatus, HealthSummary, IndicatorResult, SystemInfo
from ...base import BaseDocumentStore
from ...config import AppConfig
from ..._utils import to_iso, utc_now

router = APIRouter(prefix="/health", tags=["health"])

_started = time.monotonic()


def system_info() -> SystemInfo:
    return SystemInfo(
        uptime=round(time.monotonic() - _started, 3),
        python_version=platform.python_version(),
        platform=sys.platform,
        pid=os.getpid(),
        environment=settings.environment,
    )


def check_report(checks: List[IndicatorResult]) -> JSONResponse:
    """200 when every check passed, otherwise 503 with the same body."""
    healthy = all(check.healthy for check in checks)
    report = HealthReport(status="ok" if healthy else "error", timestamp=utc_now(), checks=checks)
    return JSONResponse(
        status_code=200 if healthy else 503,
        content=report.model_dump(mode="json", by_alias=True),
    )


def overall_status(checks: List[IndicatorResult]) -> str:
    healthy = sum(1 for check in checks if check.healthy)
    if healthy == len(checks):
        return "healthy"
    if healthy > len(checks) / 2:
        return "degraded"
    return "unhealthy"


@router.get("", response_model=HealthStatus)
async def health_check(store: BaseDocumentStore = Depends(get_store)) -> HealthStatus:
    """Health of the service and its document store."""
    database = await check_database(store)
    return HealthStatus(
        status="healthy" if database.healthy else "unhealthy",
        database=database.healthy,
        timestamp=utc_now(),
        version=settings.api_version,
    )


@router.get("/ready")
async def readiness_probe(store: BaseDocumentStore = Depends(get_store)) -> Dict[str, str]:
    """Kubernetes readiness probe."""
    if not (await check_database(store)).healthy:
        raise HTTPException(status_code=503, detail="Service not ready")
    return {"status": "ready"}


@router.get("/live")
async def liveness_probe() -> Dict[str, str]:
    """Kubernetes liveness probe."""
    return {"status": "alive"}


@router.get("/startup", response_model=HealthReport)
async def startup_probe(
    store: BaseDocumentStore = Depends(get_store),
    config: AppConfig = Depends(get_config),
):
    """Kubernetes startup probe: store reachable and backup directory writable."""
    checks = await asyncio.gather(check_database(store), check_startup_requirements(config))
    return check_report(list(checks))


@router.get("/deep", response_model=HealthReport)
async def deep_check(
    store: BaseDocumentStore = Depends(get_store),
    config: AppConfig = Depends(get_config),
):
    """Every dependency: document store, backup disk and Azure AD."""
    checks = await asyncio.gather(
        check_database(store, "cosmos_db"),
        check_backup_storage(config.backup.directory),
        check_azure_ad(config.auth),
    )
    return check_report(list(checks))


@router.get("/detailed", response_model=DetailedHealthReport)
async def detailed_health(
    store: BaseDocumentStore = Depends(get_store),
    config: AppConfig = Depends(get_config),
) -> DetailedHealthReport:
    """All checks with a summary; always 200, the status field carries the verdict."""
    start = time.perf_counter()
    checks = list(await asyncio.gather(
        check_database(store, "database_connectivity"),
        check_azure_ad(config.auth, "azure_ad_connectivity"),
        check_backup_storage(config.backup.directory, "backup_storage"),
        check_startup_requirements(config, "startup_requirements"),
    ))
    healthy = sum(1 for check in checks if check.healthy)

    return DetailedHealthReport(
        status=overall_status(checks),
        timestamp=utc_now(),
        total_duration=int((time.perf_counter() - start) * 1000),
        checks=checks,
        summary=HealthSummary(
            total=len(checks),
            healthy=healthy,
            unhealthy=len(checks) - healthy,
            health_percentage=round(healthy * 100 / len(checks)),
        ),
        system=system_info(),
    )


@router.get("/metrics")
async def health_metrics(store: BaseDocumentStore = Depends(get_store)) -> Dict[str, Any]:
    """Process and store snapshot for dashboards."""
    start = time.perf_counter()
    database = await check_database(store)
    cpu = os.times()

    return {
        "timestamp": to_iso(utc_now()),
        "collectionDuration": int((time.perf_counter() - start) * 1000),
        "system": {
            **system_info().model_dump(by_alias=True),
            "cpu": {"user": cpu.user, "system": cpu.system},
        },
        "database": {
            "status": "connected" if database.healthy else "disconnected",
            "responseTime": database.response_time,
        },
        "application": {
            "name": settings.api_title,
            "version": settings.api_version,
            "environment": settings.environment,
        },
        "health": {
            "status": "healthy" if database.healthy else "degraded",
            "lastCheck": to_iso(utc_now()),
        },
    }

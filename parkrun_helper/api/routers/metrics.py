"""Prometheus scrape endpoint."""

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST

from ..dependencies import get_metrics
from ..metrics import PrometheusMetrics

router = APIRouter(tags=["metrics"])


@router.get("/metrics")
async def scrape_metrics(metrics: PrometheusMetrics = Depends(get_metrics)) -> Response:
    """Application metrics in the Prometheus text format."""
    return Response(content=metrics.render(), media_type=CONTENT_TYPE_LATEST)

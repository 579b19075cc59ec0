"""Prometheus metrics for the HTTP API."""

import re
import time
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

_UUID_SEGMENT = re.compile(r"/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)
_NUMERIC_SEGMENT = re.compile(r"/\d+(?=/|$)")


def route_pattern(path: str) -> str:
    """Collapse ids in a request path so label cardinality stays bounded."""
    pattern = _UUID_SEGMENT.sub("/:id", path.split("?", 1)[0])
    pattern = _NUMERIC_SEGMENT.sub("/:id", pattern)
    return pattern or "/"


class PrometheusMetrics:
    """Application metrics, held in a registry owned by one app instance."""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            ["method", "route", "status_code"],
            registry=self.registry,
            buckets=(0.1, 0.5, 1, 2, 5, 10),
        )
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            ["method", "route", "status_code"],
            registry=self.registry,
        )
        self.http_request_size = Histogram(
            "http_request_size_bytes",
            "Size of HTTP requests in bytes",
            ["method", "route"],
            registry=self.registry,
            buckets=(100, 1000, 10000, 100000, 1000000),
        )
        self.http_response_size = Histogram(
            "http_response_size_bytes",
            "Size of HTTP responses in bytes",
            ["method", "route", "status_code"],
            registry=self.registry,
            buckets=(100, 1000, 10000, 100000, 1000000),
        )
        self.active_connections = Gauge(
            "http_active_connections",
            "Number of in-flight HTTP requests",
            registry=self.registry,
        )
        self.errors_total = Counter(
            "application_errors_total",
            "Total number of application errors",
            ["type", "severity", "component"],
            registry=self.registry,
        )
        self.authentication_total = Counter(
            "authentication_attempts_total",
            "Total number of authentication attempts",
            ["type", "status", "provider"],
            registry=self.registry,
        )
        self.business_operations_total = Counter(
            "business_operations_total",
            "Total number of business operations",
            ["operation", "status", "user_type"],
            registry=self.registry,
        )

    def record_http_request(
        self,
        method: str,
        route: str,
        status_code: int,
        duration: float,
        request_size: int = 0,
        response_size: int = 0,
    ) -> None:
        labels = {"method": method, "route": route, "status_code": str(status_code)}
        self.http_request_duration.labels(**labels).observe(duration)
        self.http_requests_total.labels(**labels).inc()
        if request_size:
            self.http_request_size.labels(method=method, route=route).observe(request_size)
        if response_size:
            self.http_response_size.labels(**labels).observe(response_size)

        if status_code >= 500:
            self.record_error("server_error", "error", "http")
        elif status_code >= 400:
            self.record_error("client_error", "warning", "http")

    def record_error(self, error_type: str, severity: str, component: str) -> None:
        self.errors_total.labels(type=error_type, severity=severity, component=component).inc()

    def record_authentication(self, success: bool, auth_type: str = "bearer", provider: str = "azure_ad") -> None:
        status = "success" if success else "failure"
        self.authentication_total.labels(type=auth_type, status=status, provider=provider).inc()

    def record_helper_operation(self, operation: str, success: bool, user_id: Optional[str] = None) -> None:
        self.business_operations_total.labels(
            operation=f"helper_{operation}",
            status="success" if success else "failure",
            user_type="authenticated" if user_id else "anonymous",
        ).inc()

    def render(self) -> bytes:
        """Current metrics in the Prometheus text exposition format."""
        return generate_latest(self.registry)


def _header_int(value: Optional[str]) -> int:
    try:
        return int(value or 0)
    except ValueError:
        return 0


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count, time and size every HTTP request."""

    def __init__(self, app, metrics: PrometheusMetrics):
        super().__init__(app)
        self.metrics = metrics

    async def dispatch(self, request: Request, call_next):
        route = route_pattern(request.url.path)
        request_size = _header_int(request.headers.get("content-length"))
        start = time.perf_counter()
        self.metrics.active_connections.inc()
        try:
            response = await call_next(request)
        except Exception:
            self.metrics.record_http_request(request.method, route, 500, time.perf_counter() - start, request_size)
            raise
        finally:
            self.metrics.active_connections.dec()

        self.metrics.record_http_request(
            request.method,
            route,
            response.status_code,
            time.perf_counter() - start,
            request_size,
            _header_int(response.headers.get("content-length")),
        )
        return response

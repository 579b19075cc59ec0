"""Tests for Prometheus metrics collection and the scrape endpoint."""

import pytest

from parkrun_helper.api.metrics import PrometheusMetrics, route_pattern


@pytest.fixture
def metrics(client):
    return client.app.state.metrics


@pytest.mark.parametrize("path, expected", [
    ("/api/helpers", "/api/helpers"),
    ("/api/helpers/0b7e4c1e-4a5f-4f0e-9a59-7f1d6c2b9e11", "/api/helpers/:id"),
    ("/api/helpers/12345?x=1", "/api/helpers/:id"),
    ("/api/backup/restore/backup_1700000000000_abcdef", "/api/backup/restore/backup_1700000000000_abcdef"),
    ("", "/"),
])
def test_route_pattern(path, expected):
    assert route_pattern(path) == expected


def test_record_http_request_counts_errors():
    metrics = PrometheusMetrics()

    metrics.record_http_request("GET", "/api/helpers", 200, 0.05, response_size=512)
    metrics.record_http_request("GET", "/api/helpers", 404, 0.01)
    metrics.record_http_request("POST", "/api/backup/full", 500, 2.5)

    value = metrics.registry.get_sample_value
    assert value("http_requests_total", {"method": "GET", "route": "/api/helpers", "status_code": "200"}) == 1
    assert value("http_response_size_bytes_count", {"method": "GET", "route": "/api/helpers", "status_code": "200"}) == 1
    assert value("application_errors_total", {"type": "client_error", "severity": "warning", "component": "http"}) == 1
    assert value("application_errors_total", {"type": "server_error", "severity": "error", "component": "http"}) == 1


def test_registries_are_independent():
    first, second = PrometheusMetrics(), PrometheusMetrics()
    first.record_authentication(success=True)

    labels = {"type": "bearer", "status": "success", "provider": "azure_ad"}
    assert first.registry.get_sample_value("authentication_attempts_total", labels) == 1
    assert second.registry.get_sample_value("authentication_attempts_total", labels) is None


def test_requests_are_counted(client, metrics):
    client.get("/api/health/live")
    client.get("/api/health/live")

    labels = {"method": "GET", "route": "/api/health/live", "status_code": "200"}
    assert metrics.registry.get_sample_value("http_requests_total", labels) == 2
    assert metrics.registry.get_sample_value("http_request_duration_seconds_count", labels) == 2
    assert metrics.registry.get_sample_value("http_active_connections") == 0


def test_authentication_attempts_are_counted(client, metrics, auth_headers):
    client.get("/api/secure-data", headers=auth_headers)
    client.get("/api/secure-data")

    value = metrics.registry.get_sample_value
    assert value("authentication_attempts_total", {"type": "bearer", "status": "success", "provider": "azure_ad"}) == 1
    assert value("authentication_attempts_total", {"type": "bearer", "status": "failure", "provider": "azure_ad"}) == 1


def test_helper_operations_are_counted(client, metrics, auth_headers):
    body = {"name": "Alice Smith", "parkrunId": "A123456"}
    helper = client.post("/api/helpers", json=body, headers=auth_headers).json()
    client.post("/api/helpers", json=body, headers=auth_headers)
    client.delete(f"/api/helpers/{helper['id']}", headers=auth_headers)
    client.get(f"/api/helpers/{helper['id']}", headers=auth_headers)

    def count(operation, status):
        labels = {"operation": operation, "status": status, "user_type": "authenticated"}
        return metrics.registry.get_sample_value("business_operations_total", labels)

    assert count("helper_create", "success") == 1
    assert count("helper_create", "failure") == 1
    assert count("helper_delete", "success") == 1
    assert count("helper_view", "failure") == 1


def test_metrics_endpoint(client):
    client.get("/api/health/live")

    response = client.get("/api/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert 'http_requests_total{method="GET",route="/api/health/live",status_code="200"} 1.0' in response.text
    assert "authentication_attempts_total" in response.text

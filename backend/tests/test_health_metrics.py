"""
Tests for health, metrics and request middleware
"""
from folio.core.middleware_metrics import _normalize_endpoint


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_detailed_health_reports_integrations(client):
    body = client.get("/health/detailed").json()
    assert body["components"]["database"]["status"] == "healthy"
    assert set(body["components"]["integrations"]) == {
        "ai_gateway", "openai", "gemini", "resend", "unsplash", "firecrawl",
    }


def test_request_id_header(client):
    response = client.get("/api")
    assert response.json()["name"] == "Folio CMS"
    assert response.headers.get("X-Request-ID")


def test_metrics_exposes_counters(client):
    client.get("/health")
    client.get("/functions/v1/signal-ingest")
    text = client.get("/metrics").text
    assert "folio_http_requests_total" in text
    assert 'folio_function_invocations_total{function="signal-ingest",outcome="client_error"}' in text


def test_normalize_endpoint():
    path = "/api/projects/0b6f1c9e-3c1a-4e8e-9a43-0d5b1b2f7a10/images"
    assert _normalize_endpoint(path) == "/api/projects/{id}/images"

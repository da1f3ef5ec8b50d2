"""
Tests for service info, health and readiness endpoints, and request logging.
"""
from unittest.mock import patch

from fastapi import FastAPI
from fastapi.testclient import TestClient


# =============================================================================
# ROOT / LIVENESS
# =============================================================================

def test_root_endpoint(client):
    """Test the root endpoint returns API info."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Medical Records Service API"
    assert data["version"] == "1.0.0"
    assert data["api_prefix"] == "/api/v1"


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["timestamp"].endswith("Z")


# =============================================================================
# READINESS
# =============================================================================

def test_ready_endpoint(client):
    response = client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["dependencies"][0]["name"] == "database"
    assert data["dependencies"][0]["status"] == "ok"


def test_ready_endpoint_database_down(client, temp_db):
    """A database that cannot be opened makes the service not ready."""
    with patch.object(temp_db, "get_connection", side_effect=OSError("unable to open")):
        response = client.get("/ready")
    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "not_ready"
    assert data["dependencies"][0]["status"] == "unavailable"


# =============================================================================
# REQUEST LOGGING MIDDLEWARE
# =============================================================================

def _middleware_client():
    from core.middleware import LoggingMiddleware

    app = FastAPI()
    app.add_middleware(LoggingMiddleware)

    @app.get("/ping")
    async def ping():
        from core.logging_config import get_request_id
        return {"request_id": get_request_id()}

    return TestClient(app)


def test_request_id_header_generated():
    response = _middleware_client().get("/ping")
    request_id = response.headers["X-Request-ID"]
    assert len(request_id) == 8
    assert response.json() == {"request_id": request_id}


def test_request_id_header_propagated():
    response = _middleware_client().get("/ping", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"
    assert response.json() == {"request_id": "trace-123"}


def test_json_log_lines_carry_request_and_user():
    import json
    import logging

    from core.logging_config import (
        JSONFormatter,
        clear_request_id,
        clear_user_id,
        set_request_id,
        set_user_id,
    )

    record = logging.LogRecord(
        "services.patient_service", logging.INFO, __file__, 1, "Patient created", None, None
    )
    record.patient_id = 3

    set_request_id("abc12345")
    set_user_id(7)
    try:
        entry = json.loads(JSONFormatter().format(record))
    finally:
        clear_request_id()
        clear_user_id()

    assert entry["message"] == "Patient created"
    assert entry["request_id"] == "abc12345"
    assert entry["user_id"] == 7
    assert entry["extra"] == {"patient_id": 3}

    assert "user_id" not in json.loads(JSONFormatter().format(record))


def test_production_app_wiring():
    from main import app

    paths = {route.path for route in app.routes}
    assert "/api/v1/patients" in paths
    assert "/api/v1/medical-records/{record_id}" in paths
    assert "/api/v1/lab-results/mine" in paths
    assert "/api/v1/auth/login" in paths
    assert "/api/v1/users/{user_id}" in paths

    response = TestClient(app).get("/")
    assert response.status_code == 200
    assert "X-Request-ID" in response.headers

"""
Tests for the health check endpoint.
"""


def test_health_check_returns_200(client):
    """
    Verify the health endpoint responds with HTTP 200.

    No token is needed; monitoring calls this anonymously.
    """
    response = client.get("/health")
    assert response.status_code == 200


def test_health_check_returns_service_name(client):
    response = client.get("/health")
    data = response.json()
    assert data["service"] == "family-ledger"


def test_health_check_reports_database_status(client):
    """
    Verify the response includes database connectivity status.

    Monitoring systems use this field to detect database outages.
    """
    response = client.get("/health")
    data = response.json()
    assert data["database"] == "healthy"
    assert data["status"] == "healthy"

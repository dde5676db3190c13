"""
Tests for health and version endpoints
"""


def test_health_endpoint(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "leave-ledger"}


def test_version_endpoint(client):
    data = client.get("/api/v1/version").json()
    assert data["service"] == "leave-ledger"
    assert data["env"] in ("local", "staging", "prod")

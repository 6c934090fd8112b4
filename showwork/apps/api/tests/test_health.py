"""
Test health check endpoints.
"""


def test_health_check(client):
    """
    Test that the health check endpoint returns 200 OK.
    """
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert "status" in data
    assert data["status"] == "ok"


def test_readiness_without_redis(client):
    """
    With the in-memory view store the database is the only dependency.
    """
    response = client.get("/api/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["checks"]["database"] == {"status": "ok"}
    assert data["checks"]["redis"]["status"] == "not_used"


def test_liveness(client):
    assert client.get("/api/health/live").json() == {"status": "alive"}


def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "ShowWork"


def test_request_id_header(client):
    response = client.get("/api/health")
    assert "X-Request-ID" in response.headers

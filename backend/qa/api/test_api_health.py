"""
Tests de API - Health y disponibilidad
"""


class TestHealthAPI:
    """Tests de endpoints de health"""

    def test_health_ready_returns_200(self, client):
        """GET /health/ready debe retornar 200"""
        r = client.get("/health/ready")
        assert r.status_code == 200

    def test_health_ready_response_body(self, client):
        """GET /health/ready debe retornar status ok"""
        r = client.get("/health/ready")
        assert r.json().get("status") == "ok"

    def test_security_headers(self, client):
        r = client.get("/health/ready")
        assert r.headers["X-Content-Type-Options"] == "nosniff"
        assert r.headers["X-Frame-Options"] == "DENY"

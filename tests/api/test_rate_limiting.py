from middleware.rate_limiter import limiter
from core.config import settings


def test_rate_limiter_disabled_in_testing():
    """Verify rate limiter is disabled during tests."""

    assert settings.ENV == "testing"
    assert limiter.enabled is False


async def test_can_make_multiple_requests_in_tests(client, customer):
    """Login is limited to 5/minute outside tests."""
    for _ in range(8):
        response = await client.post("/api/auth/login", json={
            "email": customer.email,
            "password": "password123"
        })
        assert response.status_code == 200


async def test_health_echoes_request_id(client):
    response = await client.get("/health", headers={"X-Request-ID": "trace-123"})

    assert response.status_code == 200
    assert response.json() == {"status": "Healthy"}
    assert response.headers["X-Request-ID"] == "trace-123"


async def test_unknown_route_uses_error_body(client):
    response = await client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}

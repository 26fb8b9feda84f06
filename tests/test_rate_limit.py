import pytest

from spendwise.core.config import settings

LOGIN_BODY = {"email": "nobody@example.com", "password": "secret123"}


def test_login_attempts_are_limited(client):
    for _ in range(settings.LOGIN_RATE_LIMIT_MAX):
        assert client.post("/api/auth/login", json=LOGIN_BODY).status_code == 401

    response = client.post("/api/auth/login", json=LOGIN_BODY)
    assert response.status_code == 429
    assert response.json() == {"success": False, "message": "Too many login attempts, please try again later."}


def test_api_budget_is_shared_across_routers(client):
    half = settings.RATE_LIMIT_MAX // 2
    # Unauthenticated requests count too.
    for _ in range(half):
        assert client.get("/api/expenses").status_code == 401
    for _ in range(settings.RATE_LIMIT_MAX - half):
        assert client.get("/api/auth/me").status_code == 401

    response = client.get("/api/budgets")
    assert response.status_code == 429
    assert response.json() == {"success": False, "message": "Too many requests, please try again later."}


def test_logins_use_up_the_api_budget(client):
    for _ in range(settings.LOGIN_RATE_LIMIT_MAX):
        client.post("/api/auth/login", json=LOGIN_BODY)
    for _ in range(settings.RATE_LIMIT_MAX - settings.LOGIN_RATE_LIMIT_MAX):
        assert client.get("/api/reports/overview").status_code == 401

    assert client.get("/api/reports/overview").status_code == 429


def test_invalid_bodies_are_counted(client):
    for _ in range(settings.LOGIN_RATE_LIMIT_MAX):
        assert client.post("/api/auth/login", json={}).status_code == 400

    assert client.post("/api/auth/login", json=LOGIN_BODY).status_code == 429


@pytest.mark.parametrize("path", ["/api/health", "/"])
def test_health_is_not_limited(client, path):
    for _ in range(settings.RATE_LIMIT_MAX + 5):
        response = client.get(path)
    assert response.status_code == 200

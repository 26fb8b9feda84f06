from datetime import timedelta

from spendwise.core.security import create_access_token


def test_signup_returns_user_and_token(client):
    response = client.post(
        "/api/auth/signup",
        json={"name": "Alice", "email": "Alice@Example.com", "password": "secret123"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["token"]
    user = body["data"]["user"]
    assert user["email"] == "alice@example.com"
    assert user["name"] == "Alice"
    assert user["settings"] == {"budgetLimits": {}}
    assert "password" not in user
    assert "passwordHash" not in user


def test_duplicate_email_is_case_insensitive(client, signup_user):
    signup_user(email="alice@example.com")
    response = client.post(
        "/api/auth/signup",
        json={"name": "Other", "email": "ALICE@example.com", "password": "secret123"},
    )
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "User already exists"}


def test_signup_validation_messages(client):
    response = client.post("/api/auth/signup", json={"email": "a@example.com", "password": "secret123"})
    assert response.status_code == 400
    assert response.json()["message"] == "Name is required"

    response = client.post("/api/auth/signup", json={"name": "A", "email": "nope", "password": "secret123"})
    assert response.json()["message"] == "Please provide a valid email"

    response = client.post("/api/auth/signup", json={"name": "A", "email": "a@example.com", "password": "123"})
    assert response.json()["message"] == "Password must be at least 6 characters long"


def test_login(client, signup_user):
    signup_user(email="bob@example.com", password="hunter22")

    response = client.post("/api/auth/login", json={"email": "BOB@example.com", "password": "hunter22"})
    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == "bob@example.com"

    wrong = client.post("/api/auth/login", json={"email": "bob@example.com", "password": "nope-nope"})
    unknown = client.post("/api/auth/login", json={"email": "who@example.com", "password": "hunter22"})
    for response in (wrong, unknown):
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid email or password"}


def test_me_requires_token(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized, no token provided"

    response = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_token_for_deleted_user(client):
    token = create_access_token({"sub": "11111111-1111-4111-8111-111111111111"})
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["message"] == "User not found or disabled"


def test_expired_token(client, signup_user):
    _, user = signup_user()
    token = create_access_token({"sub": user["id"]}, expires_delta=timedelta(seconds=-5))
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["message"] == "Token expired"


def test_me_returns_profile(client, signup_user):
    headers, user = signup_user()
    response = client.get("/api/auth/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["id"] == user["id"]


def test_update_merges_budget_limits(client, auth_headers):
    client.put("/api/auth/update", json={"settings": {"budgetLimits": {"Food": 300}}}, headers=auth_headers)
    response = client.put(
        "/api/auth/update",
        json={"name": "Alice B", "settings": {"budgetLimits": {"Transport": 80}}},
        headers=auth_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["token"]
    assert data["user"]["name"] == "Alice B"
    assert data["user"]["settings"]["budgetLimits"] == {"Food": 300, "Transport": 80}


def test_update_rejects_bad_limit(client, auth_headers):
    response = client.put(
        "/api/auth/update",
        json={"settings": {"budgetLimits": {"Food": -5}}},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Budget limit for Food must be positive"


def test_update_email_conflict(client, signup_user):
    signup_user(email="taken@example.com")
    headers, _ = signup_user(name="Carol", email="carol@example.com")
    response = client.put("/api/auth/update", json={"email": "Taken@example.com"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Email is already in use"


def test_update_password_allows_new_login(client, signup_user):
    headers, _ = signup_user(email="dave@example.com", password="first-pass")
    client.put("/api/auth/update", json={"password": "second-pass"}, headers=headers)

    old = client.post("/api/auth/login", json={"email": "dave@example.com", "password": "first-pass"})
    new = client.post("/api/auth/login", json={"email": "dave@example.com", "password": "second-pass"})
    assert old.status_code == 401
    assert new.status_code == 200

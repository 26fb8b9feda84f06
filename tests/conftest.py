import os

# Settings are read at import time, so the environment goes first.
os.environ["ENVIRONMENT"] = "test"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["AWS_DEFAULT_REGION"] = "eu-west-1"
os.environ["DYNAMO_REGION"] = "eu-west-1"
os.environ["DYNAMO_USERS_TABLE"] = "test-users"
os.environ["DYNAMO_EXPENSES_TABLE"] = "test-expenses"
os.environ.pop("DYNAMO_ENDPOINT_URL", None)

import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from spendwise.core.rate_limit import limiter
from spendwise.db import dynamo
from spendwise.main import app


@pytest.fixture
def dynamodb():
    with mock_aws():
        dynamo.reset_resource()
        dynamo.create_tables()
        yield dynamo
    dynamo.reset_resource()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield


@pytest.fixture
def client(dynamodb):
    return TestClient(app)


@pytest.fixture
def signup_user(client):
    def _signup(name="Alice", email="alice@example.com", password="secret123"):
        response = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {"Authorization": f"Bearer {data['token']}"}, data["user"]

    return _signup


@pytest.fixture
def auth_headers(signup_user):
    headers, _ = signup_user()
    return headers


@pytest.fixture
def make_expense(client):
    def _make(headers, **fields):
        body = {"title": "Coffee", "amount": 4.5, "category": "Food", "date": "2025-11-03T12:00:00Z"}
        body.update(fields)
        response = client.post("/api/expenses", json=body, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make

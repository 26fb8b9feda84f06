def test_root(client):
    assert client.get("/").json() == {"message": "Welcome to SpendWise API"}


def test_health(client):
    body = client.get("/api/health").json()
    assert body["status"] == "healthy"
    assert body["timestamp"].endswith("Z")


def test_status_reports_tables(client):
    body = client.get("/api/status").json()
    assert body["overall_status"] == "healthy"
    tables = body["services"]["dynamodb"]["tables"]
    assert tables["users"] == {"name": "test-users", "status": "accessible"}
    assert tables["expenses"]["status"] == "accessible"


def test_unknown_endpoint(client):
    response = client.get("/api/nothing/here")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Endpoint /api/nothing/here not found"}


def test_malformed_json(client, auth_headers):
    response = client.post(
        "/api/expenses",
        content=b'{"title": ',
        headers={**auth_headers, "Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Malformed JSON body"}

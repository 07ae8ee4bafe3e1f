def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_health_and_readiness(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/ready").json() == {"ready": True, "broker": "connected"}


def test_readiness_reports_missing_broker(make_client):
    client = make_client(None)
    response = client.get("/ready")

    assert response.status_code == 200
    assert response.json()["broker"] == "disconnected"


def test_404_handler(client):
    response = client.get("/non-existent-route")

    assert response.status_code == 404
    body = response.json()
    assert body["status_code"] == 404
    assert body["path"] == "/non-existent-route"


def test_request_id_is_echoed(client):
    response = client.get("/", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_is_generated(client):
    assert client.get("/").headers["X-Request-ID"]


def test_cors_headers(client):
    response = client.options(
        "/subjects",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_duplicate_user_conflicts(client, user):
    response = client.post("/users", json={"username": "ada", "email": "other@example.com", "name": "Ada"})
    assert response.status_code == 409


def test_invalid_user_payload(client):
    response = client.post("/users", json={"username": "x", "email": "not-an-email", "name": ""})

    assert response.status_code == 422
    assert response.json()["error"] == "Validation Error"


def test_me(client, auth, user):
    assert client.get("/users/me", headers=auth).json() == user


def test_subjects_are_scoped_to_their_owner(client, auth, subject):
    other = client.post("/users", json={"username": "eve", "email": "eve@example.com", "name": "Eve"}).json()
    other_auth = {"X-User-Id": other["id"]}

    assert client.get("/subjects", headers=other_auth).json() == []
    assert client.get(f"/subjects/{subject['id']}", headers=other_auth).status_code == 404
    assert [s["id"] for s in client.get("/subjects", headers=auth).json()] == [subject["id"]]


def test_subject_defaults(subject):
    assert subject["color"] == "#4F46E5"
    assert subject["fileCount"] == 0

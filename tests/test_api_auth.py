API = "/api/v1"


def test_register_login_and_me(client):
    response = client.post(
        f"{API}/auth/register",
        json={"fullName": "Sari Wulandari", "email": "Sari@Example.com", "password": "s3cret-pass"},
    )
    assert response.status_code == 201
    assert response.json()["email"] == "sari@example.com"
    assert response.json()["role"] == "user"

    response = client.post(f"{API}/auth/login", json={"email": "sari@example.com", "password": "s3cret-pass"})
    assert response.status_code == 200
    token = response.json()["accessToken"]

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["fullName"] == "Sari Wulandari"


def test_register_rejects_duplicate_email(client, user):
    response = client.post(
        f"{API}/auth/register",
        json={"fullName": "Ana Again", "email": user.email, "password": "another-pass"},
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Email already registered"


def test_register_validation_errors_are_field_level(client):
    response = client.post(f"{API}/auth/register", json={"fullName": "X", "email": "not-an-email", "password": "short"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "ValidationException"
    fields = {e["field"] for e in error["details"]["errors"]}
    assert {"email", "password"} <= fields


def test_login_with_wrong_password(client, user):
    response = client.post(f"{API}/auth/login", json={"email": user.email, "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UnauthorizedException"


def test_me_requires_token(client):
    response = client.get(f"{API}/auth/me")
    assert response.status_code == 401
    assert response.json()["error"]["path"] == f"{API}/auth/me"


def test_me_rejects_garbage_token(client):
    response = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_health_is_unprefixed(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_responses_carry_request_id(client):
    response = client.get("/health", headers={"X-Request-ID": "5f0c1a9e2b7d4c3e8a6f1b2d3c4e5f60"})
    assert response.headers["X-Request-ID"] == "5f0c1a9e2b7d4c3e8a6f1b2d3c4e5f60"

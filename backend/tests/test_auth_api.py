class TestRegister:
    def test_register(self, client):
        response = client.post("/api/auth/register", json={
            "username": "robin",
            "email": "Robin@Example.com",
            "password": "password123",
        })
        assert response.status_code == 201
        user = response.get_json()["user"]
        assert user["email"] == "robin@example.com"
        assert user["temperature_unit"] == "FAHRENHEIT"

    def test_duplicate_username(self, client, auth_headers):
        response = client.post("/api/auth/register", json={
            "username": "alex",
            "email": "other@example.com",
            "password": "password123",
        })
        assert response.status_code == 409

    def test_validation_errors(self, client):
        response = client.post("/api/auth/register", json={"username": "x", "email": "nope", "password": "short"})
        body = response.get_json()
        assert response.status_code == 400
        assert body["error"] == "Validation failed"
        assert set(body["details"]) == {"username", "email", "password"}


class TestLogin:
    def test_login_returns_tokens(self, client, auth_headers):
        response = client.post("/api/auth/login", json={"email": "alex@example.com", "password": "password123"})
        body = response.get_json()
        assert response.status_code == 200
        assert body["access_token"]
        assert body["refresh_token"]

    def test_login_email_is_case_insensitive(self, client, auth_headers):
        response = client.post("/api/auth/login", json={"email": "Alex@Example.com", "password": "password123"})
        assert response.status_code == 200

    def test_wrong_password(self, client, auth_headers):
        response = client.post("/api/auth/login", json={"email": "alex@example.com", "password": "wrongpass1"})
        assert response.status_code == 401

    def test_protected_routes_need_a_token(self, client):
        assert client.get("/api/cycles").status_code == 401


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.get_json()["status"] == "healthy"

    def test_unknown_route_is_json(self, client):
        response = client.get("/api/nowhere")
        assert response.status_code == 404
        assert response.get_json() == {"error": "Resource not found"}

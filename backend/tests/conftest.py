import pytest

from bbt_tracker import create_app, db


def register_and_login(client, username="alex", email="alex@example.com", password="password123"):
    """Register a user through the API and return an Authorization header."""
    client.post("/api/auth/register", json={
        "username": username,
        "email": email,
        "password": password,
    })
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    token = response.get_json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def app():
    """App on the testing config with a fresh in-memory database."""
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(client):
    return register_and_login(client)


@pytest.fixture
def other_auth_headers(client):
    """A second, unrelated user."""
    return register_and_login(client, username="sam", email="sam@example.com")


@pytest.fixture
def make_cycle(client, auth_headers):
    """Factory creating a cycle through the API and returning its JSON."""
    def _factory(start_date="2025-10-01", headers=None, **payload):
        response = client.post(
            "/api/cycles",
            json={"start_date": start_date, **payload},
            headers=headers or auth_headers,
        )
        assert response.status_code == 201, response.get_json()
        return response.get_json()["data"]["cycle"]
    return _factory


@pytest.fixture
def add_day(client, auth_headers):
    """Factory recording a day on a cycle through the API."""
    def _factory(cycle_id, headers=None, **payload):
        return client.post(
            f"/api/cycles/{cycle_id}/days",
            json=payload,
            headers=headers or auth_headers,
        )
    return _factory


@pytest.fixture
def login_as(client):
    """Factory registering another user and returning their auth headers."""
    def _factory(username, email):
        return register_and_login(client, username=username, email=email)
    return _factory

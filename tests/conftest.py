"""Pytest configuration and fixtures for testing."""
import io
import os

# DBStorage picks its engine from APP_ENV at import time
os.environ["APP_ENV"] = "test"

import cloudinary.uploader
import pytest

from api import create_app
from models import storage

PASSWORD = "password123"


@pytest.fixture(scope="function")
def app(tmp_path):
    """Flask app on a freshly created in-memory schema."""
    storage.drop_all()
    storage.reload()

    app = create_app("test")
    app.config["UPLOAD_TMP_DIR"] = str(tmp_path / "temp")

    yield app

    storage.close()


@pytest.fixture(scope="function")
def client(app):
    """Test client without a cookie jar; tokens travel in headers/bodies."""
    return app.test_client(use_cookies=False)


@pytest.fixture(scope="function")
def cookie_client(app):
    """Test client that keeps the auth cookies set by the API."""
    return app.test_client()


@pytest.fixture(autouse=True)
def uploads(monkeypatch):
    """Replace the Cloudinary upload call; records every call it receives."""
    calls = []

    def fake_upload(path, **options):
        calls.append({"path": path, "existed": os.path.exists(path), "options": options})
        name = os.path.basename(path)
        return {
            "url": f"http://res.cloudinary.test/{name}",
            "secure_url": f"https://res.cloudinary.test/{name}",
        }

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
    return calls


@pytest.fixture
def register():
    def _register(client, username, email=None, fullname=None, password=PASSWORD, cover=False):
        data = {
            "username": username,
            "email": email or f"{username.lower()}@example.com",
            "fullname": fullname or f"{username} Example",
            "password": password,
            "avatar": (io.BytesIO(b"avatar-bytes"), "avatar.png"),
        }
        if cover:
            data["coverImage"] = (io.BytesIO(b"cover-bytes"), "cover.png")
        return client.post(
            "/api/v1/users/register", data=data, content_type="multipart/form-data"
        )

    return _register


@pytest.fixture
def login():
    def _login(client, username, password=PASSWORD):
        resp = client.post(
            "/api/v1/users/login", json={"username": username, "password": password}
        )
        assert resp.status_code == 200, resp.get_json()
        data = resp.get_json()["data"]
        return data["accessToken"], data["refreshToken"]

    return _login


@pytest.fixture
def user_a(client, register, login):
    """Registered and logged-in user 'alice': (user_id, access, refresh)."""
    resp = register(client, "alice")
    assert resp.status_code == 201, resp.get_json()
    access, refresh = login(client, "alice")
    return resp.get_json()["data"]["id"], access, refresh

import io
import os

import cloudinary.uploader

from models import storage
from models.user import User

REGISTER = "/api/v1/users/register"
LOGIN = "/api/v1/users/login"
ME = "/api/v1/users/get-current-user"


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def test_register_returns_user_without_secrets(client, register, uploads):
    resp = register(client, "Alice", email="Alice@Example.com", cover=True)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["status"] == 201
    user = body["data"]
    assert user["username"] == "alice"
    assert user["email"] == "alice@example.com"
    assert user["avatar"].startswith("https://res.cloudinary.test/")
    assert user["coverImage"].startswith("https://res.cloudinary.test/")
    for secret in ("password", "password_hash", "passwordHash", "refreshToken", "refresh_token"):
        assert secret not in user

    # both files reached the media host and the temp copies were cleaned up
    assert len(uploads) == 2
    assert all(call["existed"] for call in uploads)
    assert all(not os.path.exists(call["path"]) for call in uploads)


def test_register_stores_argon2_hash(app, client, register):
    register(client, "alice")
    stored = storage.get_session().query(User).filter(User.username == "alice").one()
    assert stored.password_hash.startswith("$argon2")
    assert "password123" not in stored.password_hash


def test_register_without_cover_image_defaults_to_empty(client, register):
    resp = register(client, "bob")
    assert resp.status_code == 201
    assert resp.get_json()["data"]["coverImage"] == ""


def test_register_duplicate_username_conflicts(client, register):
    assert register(client, "alice").status_code == 201
    resp = register(client, "ALICE", email="other@example.com")
    assert resp.status_code == 409
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"] == "CONFLICT"


def test_register_duplicate_email_conflicts(client, register):
    assert register(client, "alice", email="shared@example.com").status_code == 201
    resp = register(client, "bob", email="shared@example.com")
    assert resp.status_code == 409


def test_register_missing_fields_is_validation_error(client):
    resp = client.post(
        REGISTER,
        data={"username": "  ", "email": "x@example.com", "password": "password123",
              "avatar": (io.BytesIO(b"a"), "a.png")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 422
    details = resp.get_json()["details"]
    assert "username" in details
    assert "fullname" in details


def test_register_requires_avatar(client):
    resp = client.post(
        REGISTER,
        data={"username": "alice", "email": "alice@example.com", "fullname": "Alice",
              "password": "password123"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 422
    assert resp.get_json()["message"] == "Avatar is required"


def test_register_fails_when_upload_fails(app, client, register, monkeypatch):
    def broken_upload(path, **options):
        raise RuntimeError("media host down")

    monkeypatch.setattr(cloudinary.uploader, "upload", broken_upload)
    resp = register(client, "alice")
    assert resp.status_code == 422
    tmp_dir = app.config["UPLOAD_TMP_DIR"]
    assert os.listdir(tmp_dir) == []
    assert storage.get_session().query(User).count() == 0


def test_login_by_username_or_email(client, register):
    register(client, "alice")
    by_name = client.post(LOGIN, json={"username": "alice", "password": "password123"})
    by_email = client.post(LOGIN, json={"email": "ALICE@example.com", "password": "password123"})
    for resp in (by_name, by_email):
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["accessToken"]
        assert data["refreshToken"]
        assert data["user"]["username"] == "alice"
        assert "password_hash" not in data["user"]


def test_login_sets_http_only_cookies(client, register):
    register(client, "alice")
    resp = client.post(LOGIN, json={"username": "alice", "password": "password123"})
    cookies = resp.headers.getlist("Set-Cookie")
    assert any(c.startswith("accessToken=") and "HttpOnly" in c for c in cookies)
    assert any(c.startswith("refreshToken=") and "HttpOnly" in c for c in cookies)


def test_login_errors(client, register):
    register(client, "alice")
    assert client.post(LOGIN, json={"password": "password123"}).status_code == 400
    assert client.post(LOGIN, json={"username": "alice"}).status_code == 400
    assert client.post(LOGIN, json={"username": "nobody", "password": "password123"}).status_code == 404
    wrong = client.post(LOGIN, json={"username": "alice", "password": "wrong-password"})
    assert wrong.status_code == 401
    assert wrong.get_json()["success"] is False


def test_current_user_with_access_token(client, user_a):
    user_id, access, _ = user_a
    resp = client.get(ME, headers=_auth(access))
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["id"] == user_id
    assert "password_hash" not in data


def test_current_user_requires_token(client, user_a):
    resp = client.get(ME)
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "UNAUTHENTICATED"


def test_current_user_rejects_garbage_and_refresh_tokens(client, user_a):
    _, _, refresh = user_a
    garbage = client.get(ME, headers=_auth("not-a-jwt"))
    assert garbage.status_code == 401
    assert garbage.get_json()["error"] == "INVALID_TOKEN"

    # refresh tokens are signed with another secret and never accepted as access tokens
    wrong_kind = client.get(ME, headers=_auth(refresh))
    assert wrong_kind.status_code == 401
    assert wrong_kind.get_json()["error"] == "INVALID_TOKEN"


def test_cookie_takes_precedence_over_header(cookie_client, register, login):
    register(cookie_client, "alice")
    register(cookie_client, "bob")
    bob_access, _ = login(cookie_client, "bob")
    login(cookie_client, "alice")  # cookie jar now holds alice's tokens

    resp = cookie_client.get(ME, headers=_auth(bob_access))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["username"] == "alice"


def test_change_password(client, user_a, login):
    _, access, _ = user_a
    bad = client.patch(
        "/api/v1/users/change-password",
        json={"currentPassword": "wrong-password", "newPassword": "new-password-1"},
        headers=_auth(access),
    )
    assert bad.status_code == 400

    missing = client.patch(
        "/api/v1/users/change-password", json={"currentPassword": "password123"}, headers=_auth(access)
    )
    assert missing.status_code == 422

    ok = client.patch(
        "/api/v1/users/change-password",
        json={"currentPassword": "password123", "newPassword": "new-password-1"},
        headers=_auth(access),
    )
    assert ok.status_code == 200

    old = client.post(LOGIN, json={"username": "alice", "password": "password123"})
    assert old.status_code == 401
    login(client, "alice", password="new-password-1")


def test_register_and_login_ignore_extra_fields(client):
    resp = client.post(
        REGISTER,
        data={"username": "alice", "email": "alice@example.com", "fullname": "Alice",
              "password": "password123", "extra": "1",
              "avatar": (io.BytesIO(b"a"), "a.png")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    assert "extra" not in resp.get_json()["data"]

    login = client.post(LOGIN, json={"username": "alice", "password": "password123", "remember": True})
    assert login.status_code == 200

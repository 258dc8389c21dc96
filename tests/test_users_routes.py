"""
Integration tests for registration and login:
  POST /api/users, POST /api/auth, GET /api/auth

Login is rate-limited per client IP, so this module keeps its login calls
well under the per-minute limit.
"""

import uuid

from auth.tokens import decode_access_token


def _email() -> str:
    return f"dev-{uuid.uuid4().hex[:10]}@example.com"


class TestRegister:
    def test_register_returns_token_for_new_user(self, client, secret):
        resp = client.post("/api/users", json={"name": "Ada", "email": _email(), "password": "secret123"})
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"
        token = resp.json()["token"]
        assert len(decode_access_token(token, secret)) == 24

    def test_duplicate_email_rejected(self, client):
        email = _email()
        first = client.post("/api/users", json={"name": "Ada", "email": email, "password": "secret123"})
        assert first.status_code == 200
        again = client.post("/api/users", json={"name": "Eve", "email": email.upper(), "password": "secret456"})
        assert again.status_code == 400
        assert again.json() == {"errors": [{"msg": "User already exists"}]}

    def test_duplicate_creates_no_second_account(self, client):
        email = _email()
        client.post("/api/users", json={"name": "Ada", "email": email, "password": "secret123"})
        before = client.app.state.user_store.count()
        client.post("/api/users", json={"name": "Ada", "email": email, "password": "secret123"})
        assert client.app.state.user_store.count() == before

    def test_validation_errors_use_envelope(self, client):
        resp = client.post("/api/users", json={"name": "", "email": "not-an-email", "password": "123"})
        assert resp.status_code == 400
        errors = resp.json()["errors"]
        messages = {e["msg"] for e in errors}
        assert messages == {
            "Name is required",
            "Please include a valid email",
            "Please enter a password with 6 or more characters",
        }
        params = {e["param"] for e in errors}
        assert params == {"name", "email", "password"}
        assert all(e["location"] == "body" for e in errors)

    def test_missing_fields_reported(self, client):
        resp = client.post("/api/users", json={})
        assert resp.status_code == 400
        assert len(resp.json()["errors"]) == 3

    def test_avatar_is_gravatar(self, client, auth_headers):
        resp = client.post("/api/users", json={"name": "Ada", "email": _email(), "password": "secret123"})
        me = client.get("/api/auth", headers=auth_headers(resp.json()["token"]))
        assert me.json()["avatar"].startswith("https://gravatar.com/avatar/")
        assert me.json()["avatar"].endswith("?d=mm&r=pg&s=200")


class TestLogin:
    def test_login_with_valid_credentials(self, client, new_user, secret):
        email = _email()
        _, user_id = new_user(email=email, password="letmein1")
        resp = client.post("/api/auth", json={"email": email, "password": "letmein1"})
        assert resp.status_code == 200, resp.text
        assert decode_access_token(resp.json()["token"], secret) == user_id

    def test_login_email_is_case_insensitive(self, client, new_user):
        email = _email()
        new_user(email=email, password="letmein1")
        resp = client.post("/api/auth", json={"email": email.upper(), "password": "letmein1"})
        assert resp.status_code == 200

    def test_wrong_password_and_unknown_email_look_the_same(self, client, new_user):
        email = _email()
        new_user(email=email, password="letmein1")
        wrong_pw = client.post("/api/auth", json={"email": email, "password": "letmein2"})
        unknown = client.post("/api/auth", json={"email": _email(), "password": "letmein1"})
        assert wrong_pw.status_code == unknown.status_code == 400
        assert wrong_pw.json() == unknown.json() == {"errors": [{"msg": "Invalid Credentials"}]}

    def test_missing_password(self, client):
        resp = client.post("/api/auth", json={"email": _email()})
        assert resp.status_code == 400
        assert resp.json()["errors"][0]["msg"] == "Password is required"


class TestCurrentUser:
    def test_returns_user_without_password(self, client, new_user, auth_headers):
        email = _email()
        token, user_id = new_user(name="Grace", email=email)
        resp = client.get("/api/auth", headers=auth_headers(token))
        assert resp.status_code == 200
        body = resp.json()
        assert body["id"] == user_id
        assert body["name"] == "Grace"
        assert body["email"] == email
        assert "hashed_password" not in body
        assert "password" not in body

    def test_deleted_user_is_404(self, client, new_user, auth_headers):
        token, _ = new_user()
        assert client.delete("/api/profile", headers=auth_headers(token)).status_code == 200
        resp = client.get("/api/auth", headers=auth_headers(token))
        assert resp.status_code == 404
        assert resp.json() == {"msg": "User not found"}

"""Tests for authentication: passwords, tokens, login, RBAC."""

from datetime import datetime, timedelta, timezone

from canteen.core import security
from canteen.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    revoke_token,
    verify_password,
)


# ============== Password hashing ==============

class TestPasswordHashing:
    def test_hash_and_verify(self):
        h = get_password_hash("secret123")
        assert verify_password("secret123", h)

    def test_wrong_password_rejected(self):
        h = get_password_hash("secret123")
        assert not verify_password("wrong", h)

    def test_hash_is_unique(self):
        assert get_password_hash("same") != get_password_hash("same")  # different salts

    def test_invalid_hash_returns_false(self):
        assert not verify_password("test", "not-a-hash")


# ============== JWT tokens ==============

class TestJWTTokens:
    def test_create_and_decode(self):
        token = create_access_token(data={"sub": "42", "email": "a@canteen.io", "role": "employee"})
        payload = decode_access_token(token)
        assert payload["sub"] == "42"
        assert payload["role"] == "employee"
        assert "exp" in payload and "jti" in payload

    def test_expired_token_rejected(self):
        token = create_access_token(data={"sub": "1"}, expires_delta=timedelta(seconds=-1))
        assert decode_access_token(token) is None

    def test_garbage_token_rejected(self):
        assert decode_access_token("not.a.jwt") is None

    def test_revoked_token_rejected(self):
        token = create_access_token(data={"sub": "1"})
        assert revoke_token(token)
        assert decode_access_token(token) is None

    def test_revoking_forgets_expired_revocations(self, monkeypatch):
        now = datetime.now(timezone.utc)
        monkeypatch.setattr(security, "_revoked_tokens", {
            "stale-jti": now - timedelta(minutes=5),
            "live-jti": now + timedelta(minutes=5),
        })

        assert revoke_token(create_access_token(data={"sub": "1"}))

        remaining = security._revoked_tokens
        assert "stale-jti" not in remaining
        assert "live-jti" in remaining
        assert len(remaining) == 2


# ============== Endpoints ==============

class TestAuthEndpoints:
    def test_register_creates_employee(self, client):
        response = client.post("/api/v1/auth/register", json={
            "email": "New.Person@canteen.io",
            "password": "longenough1",
            "full_name": "New Person",
            "employee_id": "EMP777",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "new.person@canteen.io"
        assert body["role"] == "employee"
        assert "password_hash" not in body

    def test_register_duplicate_email(self, client, employee_user):
        response = client.post("/api/v1/auth/register", json={
            "email": employee_user.email, "password": "longenough1", "full_name": "Dup",
        })
        assert response.status_code == 400

    def test_register_short_password(self, client):
        response = client.post("/api/v1/auth/register", json={
            "email": "x@canteen.io", "password": "short", "full_name": "X",
        })
        assert response.status_code == 422

    def test_login_and_me(self, client, employee_user):
        response = client.post("/api/v1/auth/login", json={
            "email": employee_user.email, "password": "testpass123",
        })
        assert response.status_code == 200
        token = response.json()["access_token"]
        assert "access_token" in response.cookies

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["employee_id"] == "EMP100"

    def test_login_wrong_password(self, client, employee_user):
        response = client.post("/api/v1/auth/login", json={
            "email": employee_user.email, "password": "wrong-password",
        })
        assert response.status_code == 401

    def test_login_inactive_user(self, client, db_session, employee_user):
        employee_user.is_active = False
        db_session.commit()
        response = client.post("/api/v1/auth/login", json={
            "email": employee_user.email, "password": "testpass123",
        })
        assert response.status_code == 401

    def test_logout_revokes_token(self, client, employee_headers):
        assert client.post("/api/v1/auth/logout", headers=employee_headers).status_code == 204
        assert client.get("/api/v1/auth/me", headers=employee_headers).status_code == 401

    def test_me_requires_auth(self, client):
        assert client.get("/api/v1/auth/me").status_code == 401


class TestRBAC:
    def test_employee_cannot_reach_admin_routes(self, client, employee_headers):
        assert client.get("/api/v1/orders/", headers=employee_headers).status_code == 403
        assert client.get("/api/v1/stock/ingredients", headers=employee_headers).status_code == 403

    def test_role_is_read_from_profile_not_token(self, client, db_session, employee_user, employee_headers):
        from canteen.core.rbac import UserRole
        employee_user.role = UserRole.ADMIN
        db_session.commit()
        assert client.get("/api/v1/orders/", headers=employee_headers).status_code == 200

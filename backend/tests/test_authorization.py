"""
Authentication and authorization tests.

Verifies:
- Unauthenticated requests return 401
- Cashier role denied manager/admin operations (403)
- Manager role denied admin-only operations (403)
- Login, /me and logout lifecycle
"""

import pytest

from storefront.extensions import db
from storefront.models import ActivityLog, SessionToken

# =============================================================================
# UNAUTHENTICATED ACCESS: 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/auth/me"),
            ("POST", "/api/auth/logout"),
            ("GET", "/api/products"),
            ("POST", "/api/products"),
            ("GET", "/api/categories"),
            ("GET", "/api/inventory/logs"),
            ("POST", "/api/inventory/adjust"),
            ("GET", "/api/sales"),
            ("POST", "/api/sales"),
            ("POST", "/api/sales/1/cancel"),
            ("GET", "/api/invoices"),
            ("GET", "/api/users"),
            ("GET", "/api/logs/activity"),
            ("GET", "/api/dashboard/stats"),
        ],
    )
    def test_requires_auth(self, client, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_garbage_token(self, client):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid or expired token"

    def test_health_is_public(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "OK"
        assert body["checks"]["database"]["status"] == "healthy"


# =============================================================================
# CASHIER DENIED PRIVILEGED OPERATIONS: 403
# =============================================================================


class TestCashierDenied:
    """Cashier role can sell and browse but not manage."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("POST", "/api/products"),
            ("PUT", "/api/products/1"),
            ("DELETE", "/api/products/1"),
            ("POST", "/api/categories"),
            ("POST", "/api/inventory/adjust"),
            ("PUT", "/api/sales/1"),
            ("POST", "/api/sales/1/cancel"),
            ("GET", "/api/users"),
            ("GET", "/api/logs/activity"),
        ],
    )
    def test_forbidden(self, client, cashier_headers, method, path):
        resp = getattr(client, method.lower())(path, json={}, headers=cashier_headers)
        assert resp.status_code == 403, f"{method} {path} returned {resp.status_code}"
        assert resp.get_json()["details"]["required_permission"]

    def test_cashier_can_browse_and_view_stock(self, client, cashier_headers):
        assert client.get("/api/products", headers=cashier_headers).status_code == 200
        assert client.get("/api/inventory/logs", headers=cashier_headers).status_code == 200
        assert client.get("/api/dashboard/stats", headers=cashier_headers).status_code == 200


class TestManagerDenied:
    """Manager role lacks the admin-only permissions."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("DELETE", "/api/products/1"),
            ("DELETE", "/api/categories/1"),
            ("GET", "/api/users"),
            ("GET", "/api/logs/activity/stats"),
        ],
    )
    def test_forbidden(self, client, manager_headers, method, path):
        resp = getattr(client, method.lower())(path, headers=manager_headers)
        assert resp.status_code == 403

    def test_manager_reads_audit_log(self, client, manager_headers):
        assert client.get("/api/logs/activity", headers=manager_headers).status_code == 200


# =============================================================================
# LOGIN / LOGOUT
# =============================================================================


class TestSessionLifecycle:

    def test_login_returns_token_and_permissions(self, client, cashier_user):
        resp = client.post(
            "/api/auth/login",
            json={"email": "Cashier@Test.Local", "password": "Password123"},
        )

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["token"]
        assert body["user"]["role"] == "cashier"
        assert "CREATE_SALE" in body["permissions"]
        assert "CANCEL_SALE" not in body["permissions"]

        entry = db.session.query(ActivityLog).filter_by(action="login").one()
        assert entry.user_id == cashier_user.id

    def test_wrong_password(self, client, cashier_user):
        resp = client.post("/api/auth/login", json={"email": "cashier@test.local", "password": "nope-nope"})
        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid credentials"

    def test_missing_credentials(self, client):
        resp = client.post("/api/auth/login", json={"email": "cashier@test.local"})
        assert resp.status_code == 400

    def test_inactive_user_cannot_login(self, client, cashier_user):
        cashier_user.is_active = False
        db.session.commit()

        resp = client.post("/api/auth/login", json={"email": "cashier@test.local", "password": "Password123"})
        assert resp.status_code == 401

    def test_me_then_logout(self, client, cashier_user, login):
        headers = login("cashier@test.local")

        me = client.get("/api/auth/me", headers=headers)
        assert me.status_code == 200
        assert me.get_json()["user"]["email"] == "cashier@test.local"

        assert client.post("/api/auth/logout", headers=headers).status_code == 200
        assert client.get("/api/auth/me", headers=headers).status_code == 401

        session = db.session.query(SessionToken).one()
        assert session.is_revoked is True
        assert session.revoked_reason == "User logout"

    def test_deactivated_user_token_rejected(self, client, cashier_user, cashier_headers):
        cashier_user.is_active = False
        db.session.commit()

        assert client.get("/api/auth/me", headers=cashier_headers).status_code == 401

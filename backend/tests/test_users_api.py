"""
Employee management endpoint tests (admin only).
"""

import pytest

from storefront.extensions import db
from storefront.models import ActivityLog, SessionToken, User


def _create(client, headers, **overrides):
    body = {"name": "New Hire", "email": "hire@test.local", "password": "secret1", "role": "cashier"}
    body.update(overrides)
    return client.post("/api/users", json=body, headers=headers)


class TestCreateUser:

    def test_create(self, client, admin_headers, login):
        resp = _create(client, admin_headers, email="  Hire@Test.Local ")

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["message"] == "Employee added successfully"
        assert body["user"]["email"] == "hire@test.local"
        assert body["user"]["role"] == "cashier"
        assert "password" not in body["user"]
        assert db.session.query(ActivityLog).filter_by(action="create_user").count() == 1

        login("hire@test.local", "secret1")

    def test_duplicate_email(self, client, admin_headers):
        _create(client, admin_headers)
        resp = _create(client, admin_headers, name="Twin")
        assert resp.status_code == 409
        assert resp.get_json()["message"] == "User already exists with this email"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": " "},
            {"email": "not-an-email"},
            {"password": "123"},
            {"role": "owner"},
        ],
    )
    def test_invalid(self, client, admin_headers, overrides):
        assert _create(client, admin_headers, **overrides).status_code == 400


class TestManageUser:

    def test_update_role(self, client, admin_headers, cashier_user):
        resp = client.put(f"/api/users/{cashier_user.id}", json={"role": "manager"}, headers=admin_headers)

        assert resp.status_code == 200
        assert resp.get_json()["user"]["role"] == "manager"

    def test_password_change_revokes_sessions(self, client, admin_headers, cashier_user, cashier_headers):
        resp = client.put(f"/api/users/{cashier_user.id}", json={"password": "brand-new"}, headers=admin_headers)

        assert resp.status_code == 200
        assert client.get("/api/auth/me", headers=cashier_headers).status_code == 401

    def test_deactivate(self, client, admin_headers, cashier_user, cashier_headers):
        resp = client.put(f"/api/users/{cashier_user.id}/deactivate", headers=admin_headers)

        assert resp.status_code == 200
        assert db.session.get(User, cashier_user.id).is_active is False
        session = db.session.query(SessionToken).filter_by(user_id=cashier_user.id).one()
        assert session.is_revoked is True

    def test_cannot_deactivate_self(self, client, admin_headers, admin_user):
        resp = client.put(f"/api/users/{admin_user.id}/deactivate", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Cannot deactivate your own account"

    def test_delete_keeps_sales(self, client, admin_headers, cashier_user, cashier_headers, make_product):
        product = make_product(stock=5)
        sale = client.post(
            "/api/sales",
            json={"items": [{"product": product.id, "quantity": 1}], "paymentMethod": "cash"},
            headers=cashier_headers,
        ).get_json()["sale"]

        resp = client.delete(f"/api/users/{cashier_user.id}", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Employee permanently deleted"
        assert db.session.get(User, cashier_user.id) is None
        assert db.session.query(SessionToken).count() == 1  # only the admin's

        invoice = client.get(f"/api/sales/{sale['id']}", headers=admin_headers).get_json()["sale"]
        assert invoice["soldBy"] is None
        assert invoice["invoiceNumber"] == "INV-000001"

    def test_cannot_delete_self(self, client, admin_headers, admin_user):
        resp = client.delete(f"/api/users/{admin_user.id}", headers=admin_headers)
        assert resp.status_code == 400

    def test_list_and_get(self, client, admin_headers, admin_user, cashier_user):
        listing = client.get("/api/users", headers=admin_headers).get_json()["users"]
        assert {u["id"] for u in listing} == {admin_user.id, cashier_user.id}

        assert client.get(f"/api/users/{cashier_user.id}", headers=admin_headers).status_code == 200
        assert client.get("/api/users/999", headers=admin_headers).status_code == 404

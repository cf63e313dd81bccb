"""
Product and category endpoint tests.
"""

import pytest

from storefront.extensions import db
from storefront.models import ActivityLog, Category, InventoryLog


def _product_body(**overrides):
    body = {
        "name": "Vitrified Tile 60x60",
        "sku": "VT-6060",
        "category": "Tiles",
        "purchasePrice": 420,
        "sellingPrice": "560.50",
        "stock": 40,
        "minStockLevel": 10,
        "supplier": {"name": "Kajaria", "contact": "0120-000"},
    }
    body.update(overrides)
    return body


class TestProducts:

    def test_create_product(self, client, manager_headers):
        resp = client.post("/api/products", json=_product_body(), headers=manager_headers)

        assert resp.status_code == 201
        product = resp.get_json()["product"]
        assert product["category"] == "tiles"
        assert product["sellingPrice"] == 560.5
        assert product["stock"] == 40
        assert product["stockStatus"] == "in_stock"
        assert product["supplier"] == {"name": "Kajaria", "contact": "0120-000", "email": None}

        log = db.session.query(InventoryLog).filter_by(product_id=product["id"]).one()
        assert log.type == "initial"
        assert log.new_stock == 40
        assert db.session.query(ActivityLog).filter_by(action="create_product").count() == 1

    def test_duplicate_sku(self, client, manager_headers):
        client.post("/api/products", json=_product_body(), headers=manager_headers)
        resp = client.post("/api/products", json=_product_body(name="Other"), headers=manager_headers)
        assert resp.status_code == 409

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": ""},
            {"sku": None},
            {"sellingPrice": -1},
            {"stock": -5},
            {"stock": "2.5"},
            {"unit": "litre"},
            {"colour": "grey"},
        ],
    )
    def test_invalid_product(self, client, manager_headers, overrides):
        resp = client.post("/api/products", json=_product_body(**overrides), headers=manager_headers)
        assert resp.status_code == 400

    def test_update_cannot_touch_stock(self, client, manager_headers, make_product):
        product = make_product(stock=5)

        resp = client.put(
            f"/api/products/{product.id}",
            json={"stock": 99, "name": "Renamed"},
            headers=manager_headers,
        )

        assert resp.status_code == 200
        body = resp.get_json()["product"]
        assert body["name"] == "Renamed"
        assert body["stock"] == 5

    def test_delete_is_soft(self, client, admin_headers, make_product):
        product = make_product(stock=5)

        resp = client.delete(f"/api/products/{product.id}", headers=admin_headers)

        assert resp.status_code == 200
        detail = client.get(f"/api/products/{product.id}", headers=admin_headers).get_json()["product"]
        assert detail["isActive"] is False

    def test_list_filters(self, client, cashier_headers, make_product):
        make_product(stock=0, category="taps", name="Pillar Tap")
        make_product(stock=500, category="tiles", name="Floor Tile")

        def names(query):
            resp = client.get(f"/api/products{query}", headers=cashier_headers)
            assert resp.status_code == 200
            return [p["name"] for p in resp.get_json()["products"]]

        assert names("?stockStatus=out_of_stock") == ["Pillar Tap"]
        assert names("?category=TILES") == ["Floor Tile"]
        assert names("?search=pillar") == ["Pillar Tap"]
        assert client.get("/api/products?stockStatus=plenty", headers=cashier_headers).status_code == 400

    def test_low_stock_alerts(self, client, cashier_headers, make_product):
        make_product(stock=1, min_stock_level=5, name="Nearly Gone")
        make_product(stock=100, min_stock_level=5)

        body = client.get("/api/products/alerts/low-stock", headers=cashier_headers).get_json()

        assert body["count"] == 1
        assert body["products"][0]["name"] == "Nearly Gone"

    def test_unknown_product(self, client, cashier_headers):
        assert client.get("/api/products/9999", headers=cashier_headers).status_code == 404


class TestCategories:

    def test_category_lifecycle(self, client, admin_headers, manager_headers, cashier_headers):
        created = client.post(
            "/api/categories",
            json={"name": "Adhesives", "displayName": "Tile Adhesives"},
            headers=manager_headers,
        )
        assert created.status_code == 201
        category = created.get_json()["category"]
        assert category["name"] == "adhesives"

        duplicate = client.post(
            "/api/categories",
            json={"name": "ADHESIVES", "displayName": "Again"},
            headers=manager_headers,
        )
        assert duplicate.status_code == 409

        hidden = client.put(
            f"/api/categories/{category['id']}",
            json={"isActive": False},
            headers=manager_headers,
        )
        assert hidden.get_json()["category"]["isActive"] is False
        assert client.get("/api/categories", headers=cashier_headers).get_json()["categories"] == []
        assert len(client.get("/api/categories/all", headers=manager_headers).get_json()["categories"]) == 1

        deleted = client.delete(f"/api/categories/{category['id']}", headers=admin_headers)
        assert deleted.status_code == 200
        assert db.session.query(Category).count() == 0

    def test_missing_display_name(self, client, manager_headers):
        resp = client.post("/api/categories", json={"name": "misc"}, headers=manager_headers)
        assert resp.status_code == 400

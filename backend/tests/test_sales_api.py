"""
Sales and invoice endpoint tests.

Verifies:
- POST /api/sales posts a sale and returns the invoice
- Rejected carts return 400/404 and leave stock untouched
- Cashiers only see their own sales
- Cancellation via API restores stock and is recorded in the activity log
"""

from storefront.extensions import db
from storefront.models import ActivityLog, Product
from storefront.services import sales_service


def _post_sale(client, headers, product_id, quantity, **extra):
    body = {"items": [{"product": product_id, "quantity": quantity}], "paymentMethod": "cash"}
    body.update(extra)
    return client.post("/api/sales", json=body, headers=headers)


def _stock(product_id):
    return db.session.get(Product, product_id).stock


class TestCreateSale:

    def test_create_sale(self, client, cashier_headers, cashier_user, make_product):
        product = make_product(stock=10, selling_price="100")

        resp = _post_sale(client, cashier_headers, product.id, 3, customer={"name": "Asha", "phone": "555"})

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["message"] == "Sale created successfully"
        sale = body["sale"]
        assert sale["invoiceNumber"] == "INV-000001"
        assert sale["total"] == 300.0
        assert sale["paymentStatus"] == "paid"
        assert sale["amountDue"] == 0.0
        assert sale["customer"] == {"name": "Asha", "phone": "555", "email": None}
        assert sale["soldBy"]["id"] == cashier_user.id
        assert sale["items"][0]["productName"] == product.name
        assert sale["items"][0]["unitPrice"] == 100.0
        assert _stock(product.id) == 7

    def test_insufficient_stock(self, client, cashier_headers, make_product):
        product = make_product(stock=2, name="Basin Mixer")

        resp = _post_sale(client, cashier_headers, product.id, 5)

        assert resp.status_code == 400
        body = resp.get_json()
        assert body["message"] == "Insufficient stock for Basin Mixer. Available: 2"
        assert body["details"]["on_hand"] == 2
        assert _stock(product.id) == 2

    def test_unknown_product(self, client, cashier_headers):
        resp = _post_sale(client, cashier_headers, 777, 1)
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "Product not found: 777"

    def test_invalid_payload(self, client, cashier_headers):
        resp = client.post("/api/sales", data="not json", headers=cashier_headers)
        assert resp.status_code == 400

    def test_empty_cart(self, client, cashier_headers):
        resp = client.post("/api/sales", json={"items": [], "paymentMethod": "cash"}, headers=cashier_headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "At least one item is required"

    def test_sale_is_logged(self, client, cashier_headers, cashier_user, make_product):
        product = make_product(stock=5)

        sale = _post_sale(client, cashier_headers, product.id, 1).get_json()["sale"]

        entry = db.session.query(ActivityLog).filter_by(action="create_sale").one()
        assert entry.user_id == cashier_user.id
        assert entry.module == "sales"
        assert entry.entity_type == "Sale"
        assert entry.entity_id == sale["id"]
        assert entry.description == "Sale INV-000001 created"
        assert entry.metadata_json["method"] == "POST"

    def test_rejected_sale_not_logged(self, client, cashier_headers, make_product):
        product = make_product(stock=1)

        _post_sale(client, cashier_headers, product.id, 2)

        assert db.session.query(ActivityLog).filter_by(action="create_sale").count() == 0


class TestSaleVisibility:

    def test_cashier_sees_only_own_sales(self, client, cashier_headers, manager_headers, make_product):
        product = make_product(stock=10)
        own = _post_sale(client, cashier_headers, product.id, 1).get_json()["sale"]
        other = _post_sale(client, manager_headers, product.id, 1).get_json()["sale"]

        listing = client.get("/api/sales", headers=cashier_headers).get_json()
        assert [s["id"] for s in listing["sales"]] == [own["id"]]
        assert listing["total"] == 1

        assert client.get(f"/api/sales/{own['id']}", headers=cashier_headers).status_code == 200
        assert client.get(f"/api/sales/{other['id']}", headers=cashier_headers).status_code == 403

    def test_manager_sees_all_sales(self, client, cashier_headers, manager_headers, make_product):
        product = make_product(stock=10)
        _post_sale(client, cashier_headers, product.id, 1)
        _post_sale(client, manager_headers, product.id, 1)

        listing = client.get("/api/sales?limit=1", headers=manager_headers).get_json()

        assert listing["total"] == 2
        assert listing["totalPages"] == 2
        assert listing["currentPage"] == 1
        assert listing["sales"][0]["invoiceNumber"] == "INV-000002"

    def test_unknown_sale(self, client, manager_headers):
        assert client.get("/api/sales/999", headers=manager_headers).status_code == 404

    def test_lookup_failure_returns_500(self, client, manager_headers, monkeypatch):
        def _boom(sale_id):
            raise RuntimeError("database went away")

        monkeypatch.setattr(sales_service, "get_sale", _boom)

        resp = client.get("/api/sales/1", headers=manager_headers)

        assert resp.status_code == 500
        assert resp.get_json() == {"message": "Internal server error"}


class TestCancelSale:

    def test_cancel_restores_stock(self, client, cashier_headers, manager_headers, make_product):
        product = make_product(stock=10)
        sale = _post_sale(client, cashier_headers, product.id, 4).get_json()["sale"]

        resp = client.post(
            f"/api/sales/{sale['id']}/cancel",
            json={"reason": "Damaged in transit"},
            headers=manager_headers,
        )

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "Sale cancelled successfully"
        assert body["sale"]["status"] == "cancelled"
        assert body["sale"]["notes"].endswith("[CANCELLED] Damaged in transit")
        assert _stock(product.id) == 10

        entry = db.session.query(ActivityLog).filter_by(action="cancel_sale").one()
        assert entry.entity_id == sale["id"]

    def test_cancel_twice(self, client, cashier_headers, manager_headers, make_product):
        product = make_product(stock=10)
        sale = _post_sale(client, cashier_headers, product.id, 4).get_json()["sale"]
        client.post(f"/api/sales/{sale['id']}/cancel", headers=manager_headers)

        resp = client.post(f"/api/sales/{sale['id']}/cancel", headers=manager_headers)

        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Sale is already cancelled"
        assert _stock(product.id) == 10

    def test_cancel_unknown(self, client, manager_headers):
        resp = client.post("/api/sales/4242/cancel", json={}, headers=manager_headers)
        assert resp.status_code == 404


class TestUpdateSaleAndStats:

    def test_update_payment(self, client, cashier_headers, manager_headers, make_product):
        product = make_product(stock=10, selling_price="50")
        sale = _post_sale(client, cashier_headers, product.id, 2, amountPaid=20).get_json()["sale"]
        assert sale["paymentStatus"] == "partial"
        assert sale["amountDue"] == 80.0

        resp = client.put(f"/api/sales/{sale['id']}", json={"amountPaid": 100}, headers=manager_headers)

        assert resp.status_code == 200
        updated = resp.get_json()["sale"]
        assert updated["paymentStatus"] == "paid"
        assert updated["amountDue"] == 0.0
        assert updated["items"] == sale["items"]

    def test_stats_summary(self, client, cashier_headers, make_product):
        product = make_product(stock=10, selling_price="25")
        _post_sale(client, cashier_headers, product.id, 2)
        _post_sale(client, cashier_headers, product.id, 4)

        stats = client.get("/api/sales/stats/summary", headers=cashier_headers).get_json()["stats"]

        assert stats["totalSales"] == 2
        assert stats["totalRevenue"] == 150.0
        assert stats["avgSaleValue"] == 75.0

    def test_stats_rejects_bad_date(self, client, cashier_headers):
        resp = client.get("/api/sales/stats/summary?startDate=yesterday", headers=cashier_headers)
        assert resp.status_code == 400


class TestInvoices:

    def test_lookup_by_id_and_number(self, client, cashier_headers, make_product):
        product = make_product(stock=10)
        sale = _post_sale(client, cashier_headers, product.id, 1, customer={"name": "Kiran"}).get_json()["sale"]

        by_id = client.get(f"/api/invoices/{sale['id']}", headers=cashier_headers)
        by_number = client.get("/api/invoices/number/INV-000001", headers=cashier_headers)
        search = client.get("/api/invoices?search=kiran", headers=cashier_headers)

        assert by_id.get_json()["invoice"]["invoiceNumber"] == "INV-000001"
        assert by_number.get_json()["invoice"]["id"] == sale["id"]
        assert search.get_json()["total"] == 1

    def test_missing_invoice(self, client, cashier_headers):
        assert client.get("/api/invoices/31337", headers=cashier_headers).get_json() == {"message": "Invoice not found"}
        assert client.get("/api/invoices/number/INV-404", headers=cashier_headers).status_code == 404

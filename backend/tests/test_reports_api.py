"""
Dashboard and activity-log endpoint tests.
"""

from storefront.services import activity_service


def _sell(client, headers, product_id, quantity, **extra):
    body = {"items": [{"product": product_id, "quantity": quantity}], "paymentMethod": "cash"}
    body.update(extra)
    resp = client.post("/api/sales", json=body, headers=headers)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["sale"]


class TestDashboard:

    def test_stats(self, client, cashier_headers, manager_headers, make_product):
        tap = make_product(stock=10, selling_price="200", purchase_price="100", category="taps")
        tile = make_product(stock=20, selling_price="50", purchase_price="30", category="tiles")
        _sell(client, cashier_headers, tap.id, 2)
        _sell(client, cashier_headers, tile.id, 5, amountPaid=100)
        voided = _sell(client, cashier_headers, tile.id, 1)
        client.post(f"/api/sales/{voided['id']}/cancel", headers=manager_headers)

        stats = client.get("/api/dashboard/stats", headers=cashier_headers).get_json()

        assert stats["today"] == {"count": 2, "revenue": 650.0}
        assert stats["thisMonth"]["count"] == 2
        assert stats["products"]["totalProducts"] == 2
        assert stats["products"]["totalValue"] == 8 * 100.0 + 15 * 30.0
        assert stats["pendingPayments"] == {"count": 1, "totalDue": 150.0}
        assert stats["topProducts"][0]["productId"] == tile.id
        assert stats["topProducts"][0]["totalQuantity"] == 5
        assert sum(day["count"] for day in stats["salesTrend"]) == 2
        assert stats["recentActivities"][0]["action"] == "cancel_sale"

    def test_sales_by_category(self, client, cashier_headers, make_product):
        tap = make_product(stock=10, selling_price="200", category="taps")
        tile = make_product(stock=20, selling_price="50", category="tiles")
        _sell(client, cashier_headers, tap.id, 1)
        _sell(client, cashier_headers, tile.id, 2)

        rows = client.get("/api/dashboard/sales-by-category", headers=cashier_headers).get_json()["salesByCategory"]

        assert rows == [
            {"category": "taps", "totalQuantity": 1, "totalRevenue": 200.0},
            {"category": "tiles", "totalQuantity": 2, "totalRevenue": 100.0},
        ]


class TestActivityLog:

    def test_listing_and_filters(self, client, admin_headers, admin_user, cashier_headers, make_product):
        product = make_product(stock=5)
        _sell(client, cashier_headers, product.id, 1)
        client.post(
            "/api/inventory/adjust",
            json={"productId": product.id, "quantity": 3, "type": "purchase"},
            headers=admin_headers,
        )

        everything = client.get("/api/logs/activity", headers=admin_headers).get_json()
        assert everything["total"] == 2
        assert [entry["action"] for entry in everything["logs"]] == ["inventory_adjustment", "create_sale"]

        mine = client.get(f"/api/logs/activity?userId={admin_user.id}", headers=admin_headers).get_json()
        assert [entry["module"] for entry in mine["logs"]] == ["inventory"]

        sales_only = client.get("/api/logs/activity?module=sales", headers=admin_headers).get_json()
        assert sales_only["total"] == 1

    def test_user_summary_and_stats(self, client, admin_headers, cashier_user, cashier_headers, make_product):
        product = make_product(stock=5)
        _sell(client, cashier_headers, product.id, 1)
        _sell(client, cashier_headers, product.id, 1)

        summary = client.get(f"/api/logs/activity/user/{cashier_user.id}", headers=admin_headers).get_json()
        assert summary["summary"] == [{"action": "create_sale", "count": 2}]

        stats = client.get("/api/logs/activity/stats", headers=admin_headers).get_json()
        assert stats["byModule"] == [{"module": "sales", "count": 2, "successCount": 2, "failedCount": 0}]
        assert stats["topActions"] == [{"action": "create_sale", "count": 2}]

    def test_unknown_action_is_dropped(self, cashier_user):
        assert activity_service.log_activity(cashier_user.id, "launch_rocket", "sales", "nope") is None

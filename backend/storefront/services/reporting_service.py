# Overview: Dashboard aggregates over sales, products and activity.

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import case, func

from ..extensions import db
from ..models import ActivityLog, Product, Sale, SaleItem
from ..money import to_float
from storefront.time_utils import start_of_day, start_of_month, utcnow
from .query_utils import apply_date_range

TOP_PRODUCTS_LIMIT = 5
RECENT_ACTIVITY_LIMIT = 10


def _count_and_revenue(since: datetime) -> dict:
    count, revenue = (
        db.session.query(func.count(Sale.id), func.coalesce(func.sum(Sale.total), 0))
        .filter(Sale.status == "completed", Sale.created_at >= since)
        .one()
    )
    return {"count": int(count or 0), "revenue": to_float(revenue)}


def _product_stats() -> dict:
    row = (
        db.session.query(
            func.count(Product.id),
            func.coalesce(func.sum(Product.stock * Product.purchase_price), 0),
            func.coalesce(func.sum(case((Product.stock <= Product.min_stock_level, 1), else_=0)), 0),
            func.coalesce(func.sum(case((Product.stock == 0, 1), else_=0)), 0),
        )
        .filter(Product.is_active.is_(True))
        .one()
    )
    total, value, low, out = row
    return {
        "totalProducts": int(total or 0),
        "totalValue": to_float(value),
        "lowStock": int(low or 0),
        "outOfStock": int(out or 0),
    }


def _pending_payments() -> dict:
    count, due = (
        db.session.query(func.count(Sale.id), func.coalesce(func.sum(Sale.amount_due), 0))
        .filter(Sale.status == "completed", Sale.payment_status.in_(("pending", "partial")))
        .one()
    )
    return {"count": int(count or 0), "totalDue": to_float(due)}


def _top_products(since: datetime) -> list[dict]:
    quantity = func.sum(SaleItem.quantity).label("total_quantity")
    rows = (
        db.session.query(
            SaleItem.product_id,
            func.max(SaleItem.product_name).label("product_name"),
            quantity,
            func.sum(SaleItem.subtotal).label("total_revenue"),
        )
        .join(Sale, Sale.id == SaleItem.sale_id)
        .filter(Sale.status == "completed", Sale.created_at >= since)
        .group_by(SaleItem.product_id)
        .order_by(quantity.desc())
        .limit(TOP_PRODUCTS_LIMIT)
        .all()
    )
    return [
        {
            "productId": row.product_id,
            "productName": row.product_name,
            "totalQuantity": int(row.total_quantity or 0),
            "totalRevenue": to_float(row.total_revenue),
        }
        for row in rows
    ]


def _sales_trend(since: datetime) -> list[dict]:
    day = func.date(Sale.created_at).label("day")
    rows = (
        db.session.query(day, func.count(Sale.id), func.coalesce(func.sum(Sale.total), 0))
        .filter(Sale.status == "completed", Sale.created_at >= since)
        .group_by(day)
        .order_by(day.asc())
        .all()
    )
    return [{"date": str(d), "count": int(n or 0), "revenue": to_float(rev)} for d, n, rev in rows]


def get_dashboard_stats(now: datetime | None = None) -> dict:
    """Headline numbers for the dashboard; all windows are in UTC."""
    now = now or utcnow()

    recent = (
        db.session.query(ActivityLog)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    )

    return {
        "today": _count_and_revenue(start_of_day(now)),
        "thisMonth": _count_and_revenue(start_of_month(now)),
        "products": _product_stats(),
        "pendingPayments": _pending_payments(),
        "topProducts": _top_products(now - timedelta(days=30)),
        "salesTrend": _sales_trend(now - timedelta(days=7)),
        "recentActivities": [entry.to_dict() for entry in recent],
    }


def get_sales_by_category(*, start=None, end=None) -> list[dict]:
    """Quantity and revenue of completed sale lines grouped by current product category."""
    revenue = func.sum(SaleItem.subtotal).label("total_revenue")
    query = (
        db.session.query(
            Product.category,
            func.sum(SaleItem.quantity).label("total_quantity"),
            revenue,
        )
        .join(Sale, Sale.id == SaleItem.sale_id)
        .join(Product, Product.id == SaleItem.product_id)
        .filter(Sale.status == "completed")
    )
    query = apply_date_range(query, Sale.created_at, start, end)
    rows = query.group_by(Product.category).order_by(revenue.desc()).all()
    return [
        {
            "category": row.category,
            "totalQuantity": int(row.total_quantity or 0),
            "totalRevenue": to_float(row.total_revenue),
        }
        for row in rows
    ]

# Overview: Stock ledger writes, the manual adjustment workflow, and inventory read paths.

from __future__ import annotations

from flask import current_app
from sqlalchemy import case, func

from ..extensions import db
from ..errors import InvalidArgumentError, NotFoundError
from ..models import INVENTORY_LOG_TYPES, InventoryLog, Product
from ..money import quantize, to_float
from ..validation import parse_int
from .concurrency import lock_for_update, run_with_retry
from .query_utils import Page, apply_date_range, paginate
"""
Inventory invariants (authoritative)

- Product.stock is the on-hand quantity and is never negative.
- Every change to Product.stock appends exactly one InventoryLog row in the
  same DB transaction, with new_stock = previous_stock + quantity_change
  equal to Product.stock right after the write.
- InventoryLog rows are append-only.
"""

MOVEMENTS_LIMIT = 100
OVER_REMOVAL_MESSAGE = "Cannot remove more than available stock"


def _decrease(quantity: int) -> int:
    return -abs(quantity)


def _increase(quantity: int) -> int:
    return abs(quantity)


def _passthrough(quantity: int) -> int:
    return quantity


def _sign(quantity: int) -> int:
    return (quantity > 0) - (quantity < 0)


# (adjustment type, sign of requested quantity) -> delta rule
ADJUSTMENT_RULES = {
    ("damage", -1): _decrease,
    ("damage", 0): _decrease,
    ("damage", 1): _decrease,
    ("adjustment", -1): _decrease,
    ("adjustment", 0): _passthrough,
    ("adjustment", 1): _increase,
    ("purchase", -1): _increase,
    ("purchase", 0): _increase,
    ("purchase", 1): _increase,
}
for _type in ("sale", "return", "initial"):
    for _s in (-1, 0, 1):
        ADJUSTMENT_RULES[(_type, _s)] = _passthrough
del _type, _s


def resolve_quantity_change(adjustment_type: str, quantity: int) -> int:
    """Signed stock delta for a manual adjustment request."""
    rule = None
    if isinstance(adjustment_type, str):
        rule = ADJUSTMENT_RULES.get((adjustment_type, _sign(quantity)))
    if rule is None:
        raise InvalidArgumentError(
            f"type must be one of: {', '.join(INVENTORY_LOG_TYPES)}",
            details={"type": adjustment_type},
        )
    return rule(quantity)


def append_inventory_log(
    *,
    product: Product,
    log_type: str,
    quantity_change: int,
    previous_stock: int,
    notes: str | None = None,
    reference: str | None = None,
    reference_id: int | None = None,
    reference_model: str | None = None,
    performed_by_user_id: int | None = None,
) -> InventoryLog:
    """
    Set product.stock to previous_stock + quantity_change and append the
    matching ledger row. Flushes but never commits; the caller owns the
    transaction.
    """
    if log_type not in INVENTORY_LOG_TYPES:
        raise InvalidArgumentError(f"Invalid inventory log type: {log_type}")

    new_stock = previous_stock + quantity_change
    if new_stock < 0:
        raise InvalidArgumentError(
            OVER_REMOVAL_MESSAGE,
            details={"product_id": product.id, "stock": previous_stock, "quantity_change": quantity_change},
        )

    product.stock = new_stock

    log = InventoryLog(
        product_id=product.id,
        type=log_type,
        quantity_change=quantity_change,
        previous_stock=previous_stock,
        new_stock=new_stock,
        reference=reference,
        reference_id=reference_id,
        reference_model=reference_model,
        notes=notes,
        performed_by_user_id=performed_by_user_id,
    )
    db.session.add(log)
    db.session.flush()
    return log


def adjust_inventory(
    *,
    product_id,
    quantity,
    adjustment_type: str | None,
    notes: str | None = None,
    actor_user_id: int | None = None,
) -> tuple[InventoryLog, dict]:
    """
    Manual stock correction.

    The signed delta comes from ADJUSTMENT_RULES. Returns the ledger row and
    the product summary {id, name, sku, previousStock, currentStock}.
    """
    if not product_id or quantity is None or not adjustment_type:
        raise InvalidArgumentError("Product ID, quantity, and type are required")

    product_id = parse_int(product_id, "productId")
    quantity = parse_int(quantity, "quantity")
    quantity_change = resolve_quantity_change(adjustment_type, quantity)

    def _op():
        product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
        if not product:
            raise NotFoundError("Product not found")

        previous_stock = product.stock
        if quantity_change < 0 and abs(quantity_change) > previous_stock:
            raise InvalidArgumentError(
                OVER_REMOVAL_MESSAGE,
                details={"available": previous_stock, "requested": abs(quantity_change)},
            )

        log = append_inventory_log(
            product=product,
            log_type=adjustment_type,
            quantity_change=quantity_change,
            previous_stock=previous_stock,
            notes=notes,
            reference_model="Adjustment",
            performed_by_user_id=actor_user_id,
        )
        db.session.commit()

        summary = {
            "id": product.id,
            "name": product.name,
            "sku": product.sku,
            "previousStock": previous_stock,
            "currentStock": product.stock,
        }
        return log, summary

    log, summary = run_with_retry(_op)

    current_app.logger.info(
        "Inventory adjusted: product=%s type=%s change=%+d stock %d -> %d",
        summary["id"], adjustment_type, quantity_change, summary["previousStock"], summary["currentStock"],
    )
    return log, summary


def list_inventory_logs(
    *,
    product_id: int | None = None,
    log_type: str | None = None,
    start=None,
    end=None,
    page: int = 1,
    limit: int = 20,
) -> Page:
    query = db.session.query(InventoryLog)
    if product_id:
        query = query.filter(InventoryLog.product_id == product_id)
    if log_type:
        if log_type not in INVENTORY_LOG_TYPES:
            raise InvalidArgumentError(f"type must be one of: {', '.join(INVENTORY_LOG_TYPES)}")
        query = query.filter(InventoryLog.type == log_type)
    query = apply_date_range(query, InventoryLog.created_at, start, end)
    query = query.order_by(InventoryLog.created_at.desc(), InventoryLog.id.desc())
    return paginate(query, page, limit)


def get_product_movements(product_id: int, *, start=None, end=None) -> tuple[Product, list[InventoryLog]]:
    """Latest ledger rows for one product, newest first."""
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")

    query = db.session.query(InventoryLog).filter(InventoryLog.product_id == product_id)
    query = apply_date_range(query, InventoryLog.created_at, start, end)
    movements = (
        query.order_by(InventoryLog.created_at.desc(), InventoryLog.id.desc())
        .limit(MOVEMENTS_LIMIT)
        .all()
    )
    return product, movements


def _summary_columns():
    return (
        func.count(Product.id).label("total_products"),
        func.coalesce(func.sum(Product.stock * Product.purchase_price), 0).label("stock_value"),
        func.coalesce(func.sum(Product.stock * Product.selling_price), 0).label("selling_value"),
        func.coalesce(func.sum(case((Product.stock <= Product.min_stock_level, 1), else_=0)), 0).label("low_stock"),
        func.coalesce(func.sum(case((Product.stock == 0, 1), else_=0)), 0).label("out_of_stock"),
    )


def _summary_row_dict(row) -> dict:
    return {
        "totalProducts": int(row.total_products or 0),
        "totalStockValue": to_float(quantize(row.stock_value)),
        "totalSellingValue": to_float(quantize(row.selling_value)),
        "lowStockCount": int(row.low_stock or 0),
        "outOfStockCount": int(row.out_of_stock or 0),
    }


def get_inventory_summary() -> dict:
    """Stock counts and valuation over active products, per category and overall."""
    by_category = (
        db.session.query(Product.category, *_summary_columns())
        .filter(Product.is_active.is_(True))
        .group_by(Product.category)
        .order_by(Product.category.asc())
        .all()
    )
    overall = (
        db.session.query(*_summary_columns())
        .filter(Product.is_active.is_(True))
        .one()
    )
    return {
        "byCategory": [{"category": row.category, **_summary_row_dict(row)} for row in by_category],
        "overall": _summary_row_dict(overall),
    }

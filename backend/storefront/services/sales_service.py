"""
Sales Service - sale posting, cancellation and invoice read paths.

Posting and cancellation each run as one DB transaction: the invoice
number, the Sale, every stock change and every ledger row commit together
or not at all. Product rows are locked (FOR UPDATE where supported) and
version-checked, and lock/stale-version failures are retried.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from flask import current_app
from sqlalchemy import func, or_

from ..extensions import db
from ..errors import (
    InsufficientStockError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from ..models import (
    PAYMENT_METHODS,
    PAYMENT_STATUSES,
    SALE_STATUSES,
    WALK_IN_CUSTOMER,
    Product,
    Sale,
    SaleItem,
)
from ..money import ZERO, quantize, to_float
from ..validation import parse_int, parse_money
from .concurrency import lock_for_update, run_with_retry
from .document_service import next_invoice_number
from .inventory_service import append_inventory_log
from .query_utils import Page, apply_date_range, paginate


@dataclass(frozen=True)
class CartLine:
    product_id: int
    quantity: int
    discount: Decimal


@dataclass(frozen=True)
class SaleRequest:
    lines: list[CartLine]
    payment_method: str
    tax: Decimal
    discount: Decimal
    amount_paid: Decimal | None
    customer_name: str
    customer_phone: str | None
    customer_email: str | None
    notes: str | None


def _optional_money(payload: dict, key: str) -> Decimal | None:
    value = payload.get(key)
    if value is None:
        return None
    return parse_money(value, key)


def _parse_customer(raw) -> tuple[str, str | None, str | None]:
    if raw is None:
        return WALK_IN_CUSTOMER, None, None
    if not isinstance(raw, dict):
        raise InvalidArgumentError("customer must be an object")

    name = (raw.get("name") or "").strip()
    phone = (raw.get("phone") or "").strip() or None
    email = (raw.get("email") or "").strip() or None
    if not name:
        # A customer without a name is recorded as walk-in
        return WALK_IN_CUSTOMER, None, None
    return name, phone, email


def parse_sale_request(payload: dict | None) -> SaleRequest:
    """
    Validate the shape of a POST /sales body. No database access; every
    failure here is an InvalidArgumentError raised before any lookup.
    """
    if not isinstance(payload, dict):
        raise InvalidArgumentError("Invalid JSON payload")

    items = payload.get("items")
    if not isinstance(items, list) or not items:
        raise InvalidArgumentError("At least one item is required")

    lines: list[CartLine] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise InvalidArgumentError(f"items[{index}] must be an object")

        raw_product = item.get("product", item.get("productId"))
        if raw_product is None or raw_product == "":
            raise InvalidArgumentError(f"items[{index}].product is required")
        if item.get("quantity") is None:
            raise InvalidArgumentError(f"items[{index}].quantity is required")

        product_id = parse_int(raw_product, f"items[{index}].product")
        quantity = parse_int(item["quantity"], f"items[{index}].quantity")
        if quantity < 1:
            raise InvalidArgumentError(f"items[{index}].quantity must be at least 1")

        discount = _optional_money(item, "discount") or ZERO
        lines.append(CartLine(product_id=product_id, quantity=quantity, discount=discount))

    payment_method = payload.get("paymentMethod")
    if payment_method not in PAYMENT_METHODS:
        raise InvalidArgumentError(
            f"paymentMethod must be one of: {', '.join(PAYMENT_METHODS)}",
            details={"paymentMethod": payment_method},
        )

    customer_name, customer_phone, customer_email = _parse_customer(payload.get("customer"))

    notes = payload.get("notes")
    if notes is not None and not isinstance(notes, str):
        raise InvalidArgumentError("notes must be a string")

    return SaleRequest(
        lines=lines,
        payment_method=payment_method,
        tax=_optional_money(payload, "tax") or ZERO,
        discount=_optional_money(payload, "discount") or ZERO,
        amount_paid=_optional_money(payload, "amountPaid"),
        customer_name=customer_name,
        customer_phone=customer_phone,
        customer_email=customer_email,
        notes=notes,
    )


def _load_products_locked(product_ids) -> dict[int, Product]:
    query = (
        db.session.query(Product)
        .filter(Product.id.in_(sorted(set(product_ids))))
        .order_by(Product.id.asc())
    )
    return {p.id: p for p in lock_for_update(query).all()}


def _check_availability(request: SaleRequest, products: dict[int, Product]) -> None:
    """
    Per line, in cart order: product exists, is active, and the running
    quantity requested for it does not exceed stock.
    """
    requested: dict[int, int] = {}
    for line in request.lines:
        product = products.get(line.product_id)
        if product is None:
            raise NotFoundError(
                f"Product not found: {line.product_id}",
                details={"product_id": line.product_id},
            )
        if not product.is_active:
            raise InvalidStateError(
                f"Product is inactive: {product.name}",
                details={"product_id": product.id},
            )

        requested[product.id] = requested.get(product.id, 0) + line.quantity
        if requested[product.id] > product.stock:
            raise InsufficientStockError(
                f"Insufficient stock for {product.name}. Available: {product.stock}",
                details={
                    "product_id": product.id,
                    "requested_quantity": requested[product.id],
                    "on_hand": product.stock,
                },
            )


def compute_payment(total: Decimal, amount_paid: Decimal | None) -> tuple[Decimal, Decimal, str]:
    """Returns (amount_paid, amount_due, payment_status). Omitted payment means paid in full."""
    paid = total if amount_paid is None else quantize(amount_paid)
    balance = total - paid
    due = balance if balance > 0 else ZERO
    status = "paid" if balance <= 0 else "partial"
    return paid, due, status


def post_sale(payload: dict, actor_user_id: int | None, *, number_allocator=next_invoice_number) -> Sale:
    """
    Post a sale: validate the cart, price it, persist the Sale with a fresh
    invoice number, decrement stock and append one `sale` ledger row per
    line item.

    number_allocator is called inside the transaction and must return a
    unique invoice number; it is rolled back together with the sale.
    """
    request = parse_sale_request(payload)

    def _op():
        products = _load_products_locked(line.product_id for line in request.lines)
        _check_availability(request, products)

        sale_items: list[SaleItem] = []
        subtotal = ZERO
        for position, line in enumerate(request.lines, start=1):
            product = products[line.product_id]
            unit_price = quantize(product.selling_price)
            gross = quantize(unit_price * line.quantity)
            if line.discount > gross:
                raise InvalidArgumentError(
                    f"Discount for {product.name} cannot exceed the line amount",
                    details={"product_id": product.id, "discount": to_float(line.discount), "amount": to_float(gross)},
                )
            item_subtotal = gross - line.discount
            subtotal += item_subtotal
            sale_items.append(
                SaleItem(
                    position=position,
                    product_id=product.id,
                    product_name=product.name,
                    sku=product.sku,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    discount=line.discount,
                    subtotal=item_subtotal,
                )
            )

        if request.discount > subtotal + request.tax:
            raise InvalidArgumentError(
                "Discount cannot exceed subtotal plus tax",
                details={"discount": to_float(request.discount), "subtotal": to_float(subtotal), "tax": to_float(request.tax)},
            )

        total = subtotal + request.tax - request.discount
        amount_paid, amount_due, payment_status = compute_payment(total, request.amount_paid)

        sale = Sale(
            invoice_number=number_allocator(),
            subtotal=subtotal,
            tax=request.tax,
            discount=request.discount,
            total=total,
            payment_method=request.payment_method,
            payment_status=payment_status,
            amount_paid=amount_paid,
            amount_due=amount_due,
            customer_name=request.customer_name,
            customer_phone=request.customer_phone,
            customer_email=request.customer_email,
            sold_by_user_id=actor_user_id,
            status="completed",
            notes=request.notes,
        )
        sale.items = sale_items
        db.session.add(sale)
        db.session.flush()

        for item in sale.items:
            product = products[item.product_id]
            append_inventory_log(
                product=product,
                log_type="sale",
                quantity_change=-item.quantity,
                previous_stock=product.stock,
                reference=sale.invoice_number,
                reference_id=sale.id,
                reference_model="Sale",
                performed_by_user_id=actor_user_id,
            )

        db.session.commit()
        return sale

    sale = run_with_retry(_op)
    current_app.logger.info(
        "Posted sale %s: %d line(s), total=%s, status=%s",
        sale.invoice_number, len(sale.items), sale.total, sale.payment_status,
    )
    return sale


def cancel_sale(sale_id: int, reason: str | None, actor_user_id: int | None) -> Sale:
    """
    Cancel a completed sale: restore stock for every line item with a
    `return` ledger row and mark the sale cancelled. A second cancellation
    is rejected.
    """
    reason = (reason or "").strip() or None

    def _op():
        sale = lock_for_update(db.session.query(Sale).filter_by(id=sale_id)).first()
        if not sale:
            raise NotFoundError("Sale not found")
        if sale.status == "cancelled":
            raise InvalidStateError("Sale is already cancelled")

        products = _load_products_locked(item.product_id for item in sale.items)
        for item in sale.items:
            product = products.get(item.product_id)
            if product is None:
                raise NotFoundError(
                    f"Product not found: {item.product_id}",
                    details={"product_id": item.product_id},
                )
            append_inventory_log(
                product=product,
                log_type="return",
                quantity_change=item.quantity,
                previous_stock=product.stock,
                reference=f"Cancelled: {sale.invoice_number}",
                reference_id=sale.id,
                reference_model="Sale",
                notes=reason or "Sale cancelled",
                performed_by_user_id=actor_user_id,
            )

        sale.status = "cancelled"
        sale.notes = (sale.notes or "") + f"\n[CANCELLED] {reason or 'No reason provided'}"

        db.session.commit()
        return sale

    sale = run_with_retry(_op)
    current_app.logger.info("Cancelled sale %s (%d line(s) restocked)", sale.invoice_number, len(sale.items))
    return sale


def get_sale(sale_id: int) -> Sale:
    sale = db.session.get(Sale, sale_id)
    if not sale:
        raise NotFoundError("Sale not found")
    return sale


def get_sale_by_invoice_number(invoice_number: str) -> Sale:
    sale = db.session.query(Sale).filter_by(invoice_number=invoice_number).first()
    if not sale:
        raise NotFoundError("Invoice not found")
    return sale


def list_sales(
    *,
    start=None,
    end=None,
    payment_status: str | None = None,
    status: str | None = None,
    sold_by_user_id: int | None = None,
    page: int = 1,
    limit: int = 10,
) -> Page:
    """Newest first. sold_by_user_id restricts the listing to one seller."""
    query = db.session.query(Sale)
    if sold_by_user_id is not None:
        query = query.filter(Sale.sold_by_user_id == sold_by_user_id)
    if payment_status:
        if payment_status not in PAYMENT_STATUSES:
            raise InvalidArgumentError(f"paymentStatus must be one of: {', '.join(PAYMENT_STATUSES)}")
        query = query.filter(Sale.payment_status == payment_status)
    if status:
        if status not in SALE_STATUSES:
            raise InvalidArgumentError(f"status must be one of: {', '.join(SALE_STATUSES)}")
        query = query.filter(Sale.status == status)
    query = apply_date_range(query, Sale.created_at, start, end)
    query = query.order_by(Sale.created_at.desc(), Sale.id.desc())
    return paginate(query, page, limit)


def search_invoices(*, search: str | None = None, page: int = 1, limit: int = 10) -> Page:
    """Invoice lookup by invoice number, customer name or customer phone."""
    query = db.session.query(Sale)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Sale.invoice_number.ilike(pattern),
                Sale.customer_name.ilike(pattern),
                Sale.customer_phone.ilike(pattern),
            )
        )
    query = query.order_by(Sale.created_at.desc(), Sale.id.desc())
    return paginate(query, page, limit)


SALE_UPDATABLE_FIELDS = ("customer", "notes", "paymentStatus", "amountPaid")


def update_sale(sale_id: int, payload: dict) -> Sale:
    """
    Edit the post-sale fields of an invoice. Items, totals and status are
    immutable here; amountDue and paymentStatus are derived from amountPaid.
    A bare paymentStatus must agree with the current amountDue.
    """
    if not isinstance(payload, dict):
        raise InvalidArgumentError("Invalid JSON payload")

    updates = {k: payload[k] for k in SALE_UPDATABLE_FIELDS if k in payload}

    def _op():
        sale = lock_for_update(db.session.query(Sale).filter_by(id=sale_id)).first()
        if not sale:
            raise NotFoundError("Sale not found")

        if "customer" in updates:
            sale.customer_name, sale.customer_phone, sale.customer_email = _parse_customer(updates["customer"])

        if "notes" in updates:
            notes = updates["notes"]
            if notes is not None and not isinstance(notes, str):
                raise InvalidArgumentError("notes must be a string")
            sale.notes = notes

        if "paymentStatus" in updates:
            if updates["paymentStatus"] not in PAYMENT_STATUSES:
                raise InvalidArgumentError(f"paymentStatus must be one of: {', '.join(PAYMENT_STATUSES)}")

        if updates.get("amountPaid") is not None:
            # status is derived from the new balance; an explicit paymentStatus is ignored
            paid = parse_money(updates["amountPaid"], "amountPaid")
            sale.amount_paid = paid
            due = quantize(sale.total) - paid
            if due <= 0:
                sale.payment_status = "paid"
                sale.amount_due = ZERO
            else:
                sale.payment_status = "partial"
                sale.amount_due = due
        elif "paymentStatus" in updates:
            status = updates["paymentStatus"]
            if (status == "paid") != (quantize(sale.amount_due) <= 0):
                raise InvalidArgumentError(
                    "paymentStatus does not match the amount due",
                    details={"amountDue": float(sale.amount_due), "paymentStatus": status},
                )
            sale.payment_status = status

        db.session.commit()
        return sale

    return run_with_retry(_op)


def get_sales_stats(*, start=None, end=None) -> dict:
    """Aggregates over completed sales in the window."""
    query = db.session.query(
        func.count(Sale.id),
        func.coalesce(func.sum(Sale.total), 0),
        func.coalesce(func.sum(Sale.amount_paid), 0),
        func.coalesce(func.sum(Sale.amount_due), 0),
        func.avg(Sale.total),
    ).filter(Sale.status == "completed")
    query = apply_date_range(query, Sale.created_at, start, end)
    count, revenue, paid, due, average = query.one()

    return {
        "totalSales": int(count or 0),
        "totalRevenue": to_float(revenue),
        "totalPaid": to_float(paid),
        "totalDue": to_float(due),
        "avgSaleValue": to_float(average) if average is not None else 0.0,
    }

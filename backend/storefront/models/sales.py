from __future__ import annotations

from ..extensions import db
from ..money import to_float
from storefront.time_utils import to_utc_z

PAYMENT_METHODS = ("cash", "card", "upi", "cheque", "bank_transfer")
# "pending" is kept for compatibility with older records; no workflow sets it.
PAYMENT_STATUSES = ("paid", "partial", "pending")
SALE_STATUSES = ("completed", "cancelled")

WALK_IN_CUSTOMER = "Walk-in Customer"


class Sale(db.Model):
    """
    Sale / invoice document.

    Created in one transaction by the posting workflow with status
    "completed"; moves once, irreversibly, to "cancelled". Only customer,
    notes, payment_status and amount_paid (plus derived amount_due) may be
    edited afterwards. Never deleted.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_status_created", "status", "created_at"),
        db.Index("ix_sales_sold_by_created", "sold_by_user_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-readable document number (e.g., "INV-000123")
    invoice_number = db.Column(db.String(64), nullable=False, unique=True, index=True)

    subtotal = db.Column(db.Numeric(12, 2), nullable=False)
    tax = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    discount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total = db.Column(db.Numeric(12, 2), nullable=False)

    payment_method = db.Column(db.String(16), nullable=False)
    payment_status = db.Column(db.String(16), nullable=False, default="paid", index=True)
    amount_paid = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    amount_due = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    # Customer snapshot
    customer_name = db.Column(db.String(255), nullable=False, default=WALK_IN_CUSTOMER)
    customer_phone = db.Column(db.String(64), nullable=True)
    customer_email = db.Column(db.String(255), nullable=True)

    sold_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    status = db.Column(db.String(16), nullable=False, default="completed", index=True)
    notes = db.Column(db.Text, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    items = db.relationship(
        "SaleItem",
        back_populates="sale",
        order_by="SaleItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    sold_by = db.relationship("User")

    __mapper_args__ = {"version_id_col": version_id}

    def customer_dict(self) -> dict:
        return {
            "name": self.customer_name,
            "phone": self.customer_phone,
            "email": self.customer_email,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoiceNumber": self.invoice_number,
            "items": [item.to_dict() for item in self.items],
            "subtotal": to_float(self.subtotal),
            "tax": to_float(self.tax),
            "discount": to_float(self.discount),
            "total": to_float(self.total),
            "paymentMethod": self.payment_method,
            "paymentStatus": self.payment_status,
            "amountPaid": to_float(self.amount_paid),
            "amountDue": to_float(self.amount_due),
            "customer": self.customer_dict(),
            "soldBy": self.sold_by.to_summary() if self.sold_by else None,
            "status": self.status,
            "notes": self.notes,
            "versionId": self.version_id,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }


class SaleItem(db.Model):
    """
    Line item owned by a Sale.

    product_name, sku and unit_price are captured at posting time so later
    catalog edits never alter historical invoices.
    """
    __tablename__ = "sale_items"
    __table_args__ = (
        db.UniqueConstraint("sale_id", "position", name="uq_sale_items_sale_position"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)

    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=False)
    sku = db.Column(db.String(64), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    discount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    subtotal = db.Column(db.Numeric(12, 2), nullable=False)

    sale = db.relationship("Sale", back_populates="items")
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product": self.product_id,
            "productName": self.product_name,
            "sku": self.sku,
            "quantity": self.quantity,
            "unitPrice": to_float(self.unit_price),
            "discount": to_float(self.discount),
            "subtotal": to_float(self.subtotal),
        }

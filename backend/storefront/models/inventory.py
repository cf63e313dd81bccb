from __future__ import annotations

from ..extensions import db
from storefront.time_utils import to_utc_z

INVENTORY_LOG_TYPES = ("purchase", "sale", "adjustment", "return", "damage", "initial")
REFERENCE_MODELS = ("Sale", "Purchase", "Adjustment")


class InventoryLog(db.Model):
    """
    Append-only stock ledger. One row per stock-changing event.

    Invariant: new_stock == previous_stock + quantity_change, and new_stock
    equals Product.stock immediately after the write that produced the row.
    Rows are never updated or deleted.
    """
    __tablename__ = "inventory_logs"
    __table_args__ = (
        db.CheckConstraint(
            "new_stock = previous_stock + quantity_change",
            name="ck_inventory_logs_balance",
        ),
        db.Index("ix_inventory_logs_product_created", "product_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    type = db.Column(db.String(16), nullable=False, index=True)

    quantity_change = db.Column(db.Integer, nullable=False)
    previous_stock = db.Column(db.Integer, nullable=False)
    new_stock = db.Column(db.Integer, nullable=False)

    # Human-readable reference, e.g. invoice number
    reference = db.Column(db.String(128), nullable=True)
    reference_id = db.Column(db.Integer, nullable=True, index=True)
    reference_model = db.Column(db.String(16), nullable=True)

    notes = db.Column(db.Text, nullable=True)

    performed_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    product = db.relationship("Product")
    performed_by = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product": self.product.to_summary() if self.product else {"id": self.product_id},
            "type": self.type,
            "quantityChange": self.quantity_change,
            "previousStock": self.previous_stock,
            "newStock": self.new_stock,
            "reference": self.reference,
            "referenceId": self.reference_id,
            "referenceModel": self.reference_model,
            "notes": self.notes,
            "performedBy": self.performed_by.to_summary() if self.performed_by else None,
            "createdAt": to_utc_z(self.created_at),
        }

from __future__ import annotations

from ..extensions import db
from ..money import to_float
from storefront.time_utils import to_utc_z


class Category(db.Model):
    """
    Product category.

    name is the lower-cased lookup key stored on Product.category;
    display_name is what the UI shows. Categories are the only catalog
    records that can be hard-deleted.
    """
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False, unique=True, index=True)
    display_name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    created_by = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "isActive": self.is_active,
            "createdBy": self.created_by.to_summary() if self.created_by else None,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }


class Product(db.Model):
    """
    Product master data.

    stock is the authoritative on-hand quantity. It is only changed by the
    sale posting, sale cancellation and inventory adjustment workflows, each
    of which appends an InventoryLog row in the same DB transaction.

    version_id gives optimistic locking: a concurrent writer that loaded a
    stale row fails with StaleDataError and is retried by run_with_retry.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_products_stock_nonneg"),
        db.Index("ix_products_category_active", "category", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    sku = db.Column(db.String(64), nullable=False, unique=True, index=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    category = db.Column(db.String(64), nullable=False)
    description = db.Column(db.Text, nullable=True)
    unit = db.Column(db.String(16), nullable=False, default="piece")

    purchase_price = db.Column(db.Numeric(12, 2), nullable=False)
    selling_price = db.Column(db.Numeric(12, 2), nullable=False)

    stock = db.Column(db.Integer, nullable=False, default=0)
    min_stock_level = db.Column(db.Integer, nullable=False, default=10)
    max_stock_level = db.Column(db.Integer, nullable=False, default=1000)

    supplier_name = db.Column(db.String(255), nullable=True)
    supplier_contact = db.Column(db.String(64), nullable=True)
    supplier_email = db.Column(db.String(255), nullable=True)

    image_url = db.Column(db.String(512), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def stock_status(self) -> str:
        if self.stock == 0:
            return "out_of_stock"
        if self.stock <= self.min_stock_level:
            return "low_stock"
        if self.stock >= self.max_stock_level:
            return "overstock"
        return "in_stock"

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r} stock={self.stock}>"

    def to_summary(self) -> dict:
        return {"id": self.id, "name": self.name, "sku": self.sku, "category": self.category}

    def to_dict(self) -> dict:
        supplier = None
        if self.supplier_name or self.supplier_contact or self.supplier_email:
            supplier = {
                "name": self.supplier_name,
                "contact": self.supplier_contact,
                "email": self.supplier_email,
            }
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "unit": self.unit,
            "purchasePrice": to_float(self.purchase_price),
            "sellingPrice": to_float(self.selling_price),
            "stock": self.stock,
            "minStockLevel": self.min_stock_level,
            "maxStockLevel": self.max_stock_level,
            "stockStatus": self.stock_status,
            "supplier": supplier,
            "imageUrl": self.image_url,
            "isActive": self.is_active,
            "versionId": self.version_id,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }

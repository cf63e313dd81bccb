# Overview: Product catalog operations; creation emits the initial ledger entry.

from __future__ import annotations

from flask import current_app
from sqlalchemy import and_, or_

from ..extensions import db
from ..errors import ConflictError, NotFoundError
from ..models import Product
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_product,
    validate_payload,
)
from .inventory_service import append_inventory_log
from .query_utils import Page, paginate

STOCK_STATUSES = ("out_of_stock", "low_stock", "overstock", "in_stock")

_PRODUCT_ALIASES = {
    "purchasePrice": "purchase_price",
    "sellingPrice": "selling_price",
    "minStockLevel": "min_stock_level",
    "maxStockLevel": "max_stock_level",
    "imageUrl": "image_url",
    "isActive": "is_active",
}

_PRODUCT_WRITABLE = {
    "name",
    "category",
    "sku",
    "description",
    "unit",
    "purchase_price",
    "selling_price",
    "min_stock_level",
    "max_stock_level",
    "supplier_name",
    "supplier_contact",
    "supplier_email",
    "image_url",
    "is_active",
}

# Read-only keys the client may echo back from a previous GET
_READ_ONLY_KEYS = {"id", "_id", "stockStatus", "versionId", "createdAt", "updatedAt"}

PRODUCT_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=_PRODUCT_WRITABLE | {"stock"},
    required_on_create={"name", "category", "sku", "purchase_price", "selling_price", "stock"},
    aliases=_PRODUCT_ALIASES,
    ignored_fields=_READ_ONLY_KEYS,
)

# Stock is never edited directly; it only moves through the ledger workflows.
PRODUCT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=_PRODUCT_WRITABLE,
    aliases=_PRODUCT_ALIASES,
    ignored_fields=_READ_ONLY_KEYS | {"stock"},
)


def _flatten_supplier(payload: dict) -> dict:
    data = dict(payload or {})
    supplier = data.pop("supplier", None)
    if supplier is None:
        return data
    if not isinstance(supplier, dict):
        raise ValidationError("supplier must be an object")
    for key in ("name", "contact", "email"):
        if key in supplier:
            data[f"supplier_{key}"] = supplier[key]
    return data


def _sku_taken(sku: str, exclude_id: int | None = None) -> bool:
    query = db.session.query(Product.id).filter(Product.sku == sku)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


def _stock_status_clause(stock_status: str):
    # Mirrors Product.stock_status precedence
    if stock_status == "out_of_stock":
        return Product.stock == 0
    if stock_status == "low_stock":
        return and_(Product.stock > 0, Product.stock <= Product.min_stock_level)
    if stock_status == "overstock":
        return and_(Product.stock > Product.min_stock_level, Product.stock >= Product.max_stock_level)
    if stock_status == "in_stock":
        return and_(Product.stock > Product.min_stock_level, Product.stock < Product.max_stock_level)
    raise ValidationError(f"stockStatus must be one of: {', '.join(STOCK_STATUSES)}")


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


def create_product(payload: dict, actor_user_id: int | None) -> Product:
    """
    Create a product and its `initial` ledger entry in one transaction.

    Raises ValidationError on bad input and ConflictError on duplicate SKU.
    """
    patch = validate_payload(
        model=Product,
        payload=_flatten_supplier(payload),
        policy=PRODUCT_CREATE_POLICY,
        partial=False,
    )
    enforce_rules_product(patch)

    if _sku_taken(patch["sku"]):
        raise ConflictError("SKU already exists", details={"sku": patch["sku"]})

    product = Product(**patch)
    try:
        db.session.add(product)
        db.session.flush()

        append_inventory_log(
            product=product,
            log_type="initial",
            quantity_change=product.stock,
            previous_stock=0,
            notes="Initial stock entry",
            performed_by_user_id=actor_user_id,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Created product %s (sku=%s, stock=%d)", product.id, product.sku, product.stock)
    return product


def update_product(product_id: int, payload: dict) -> Product:
    """Edit catalog fields. A supplied stock value is ignored."""
    product = get_product(product_id)

    patch = validate_payload(
        model=Product,
        payload=_flatten_supplier(payload),
        policy=PRODUCT_UPDATE_POLICY,
        partial=True,
    )
    enforce_rules_product(patch)

    if "sku" in patch and _sku_taken(patch["sku"], exclude_id=product.id):
        raise ConflictError("SKU already exists", details={"sku": patch["sku"]})

    for key, value in patch.items():
        setattr(product, key, value)

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return product


def deactivate_product(product_id: int) -> Product:
    """Soft delete: products are never physically removed."""
    product = get_product(product_id)
    product.is_active = False
    db.session.commit()
    return product


def list_products(
    *,
    search: str | None = None,
    category: str | None = None,
    stock_status: str | None = None,
    is_active: bool | None = None,
    page: int = 1,
    limit: int = 10,
) -> Page:
    """Paginated product listing, newest first."""
    query = db.session.query(Product)

    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Product.name.ilike(pattern),
                Product.sku.ilike(pattern),
                Product.description.ilike(pattern),
            )
        )
    if category:
        query = query.filter(Product.category == category.lower())
    if is_active is not None:
        query = query.filter(Product.is_active.is_(is_active))

    if stock_status:
        query = query.filter(_stock_status_clause(stock_status))

    query = query.order_by(Product.created_at.desc(), Product.id.desc())
    return paginate(query, page, limit)


def list_low_stock() -> list[Product]:
    """Active products at or below their minimum level, emptiest first."""
    return (
        db.session.query(Product)
        .filter(Product.is_active.is_(True), Product.stock <= Product.min_stock_level)
        .order_by(Product.stock.asc(), Product.id.asc())
        .all()
    )

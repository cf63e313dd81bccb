# Overview: Flask API routes for catalog products; parses input and returns JSON responses.

# backend/storefront/routes/products.py
"""Products API routes with permission enforcement"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import log_activity, require_auth, require_permission
from ..errors import PosError, error_response
from ..services import products_service
from ..services.query_utils import page_response, parse_page_args

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _parse_bool_arg(value: str | None) -> bool | None:
    if value is None or value == "":
        return None
    return value.strip().lower() == "true"


@products_bp.get("")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_products_route():
    """
    List products, newest first.

    Query params: search, category, stockStatus, isActive, page, limit
    """
    try:
        page, limit = parse_page_args(request.args)
        result = products_service.list_products(
            search=request.args.get("search"),
            category=request.args.get("category"),
            stock_status=request.args.get("stockStatus") or None,
            is_active=_parse_bool_arg(request.args.get("isActive")),
            page=page,
            limit=limit,
        )
        return jsonify(page_response("products", result)), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify({"message": "Internal server error"}), 500


@products_bp.get("/alerts/low-stock")
@require_auth
@require_permission("VIEW_PRODUCTS")
def low_stock_route():
    products = products_service.list_low_stock()
    return jsonify({"products": [p.to_dict() for p in products], "count": len(products)}), 200


@products_bp.get("/<int:product_id>")
@require_auth
@require_permission("VIEW_PRODUCTS")
def get_product_route(product_id: int):
    try:
        product = products_service.get_product(product_id)
        return jsonify({"product": product.to_dict()}), 200
    except PosError as e:
        return error_response(e)


@products_bp.post("")
@require_auth
@require_permission("MANAGE_PRODUCTS")
@log_activity("create_product", "products")
def create_product_route():
    """
    Create product and its initial stock ledger entry.

    Requires: MANAGE_PRODUCTS permission
    Available to: admin, manager
    """
    try:
        product = products_service.create_product(request.get_json(silent=True), g.current_user.id)
        g.activity_entity = ("Product", product.id)
        g.activity_description = f"Product created: {product.name} ({product.sku})"
        return jsonify({"message": "Product created successfully", "product": product.to_dict()}), 201
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"message": "Internal server error"}), 500


@products_bp.put("/<int:product_id>")
@require_auth
@require_permission("MANAGE_PRODUCTS")
@log_activity("update_product", "products")
def update_product_route(product_id: int):
    """
    Edit product fields. Stock cannot be changed here; use /api/inventory/adjust.

    Requires: MANAGE_PRODUCTS permission
    """
    try:
        product = products_service.update_product(product_id, request.get_json(silent=True))
        g.activity_entity = ("Product", product.id)
        return jsonify({"message": "Product updated successfully", "product": product.to_dict()}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"message": "Internal server error"}), 500


@products_bp.delete("/<int:product_id>")
@require_auth
@require_permission("DELETE_PRODUCT")
@log_activity("delete_product", "products")
def delete_product_route(product_id: int):
    """
    Soft delete (deactivate) a product.

    Requires: DELETE_PRODUCT permission
    Available to: admin
    """
    try:
        product = products_service.deactivate_product(product_id)
        g.activity_entity = ("Product", product.id)
        return jsonify({"message": "Product deleted successfully"}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"message": "Internal server error"}), 500

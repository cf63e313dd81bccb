# Overview: Flask API routes for inventory operations; parses input and returns JSON responses.

# backend/storefront/routes/inventory.py
"""Inventory API routes with permission enforcement"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import log_activity, require_auth, require_permission
from ..errors import PosError, error_response
from ..services import inventory_service
from ..services.query_utils import page_response, parse_date_range, parse_page_args

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/logs")
@require_auth
@require_permission("VIEW_INVENTORY")
def list_logs_route():
    """
    Ledger entries, newest first.

    Query params: productId, type, startDate, endDate, page, limit (default 20)
    """
    try:
        page, limit = parse_page_args(request.args, default_limit=20)
        start, end = parse_date_range(request.args.get("startDate"), request.args.get("endDate"))
        result = inventory_service.list_inventory_logs(
            product_id=request.args.get("productId", type=int),
            log_type=request.args.get("type") or None,
            start=start,
            end=end,
            page=page,
            limit=limit,
        )
        return jsonify(page_response("logs", result)), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list inventory logs")
        return jsonify({"message": "Internal server error"}), 500


@inventory_bp.post("/adjust")
@require_auth
@require_permission("ADJUST_INVENTORY")
@log_activity("inventory_adjustment", "inventory")
def adjust_route():
    """
    Manual stock adjustment.

    Body: {productId, quantity, type, notes?}

    Requires: ADJUST_INVENTORY permission
    Available to: admin, manager
    """
    try:
        data = request.get_json(silent=True) or {}
        log, product = inventory_service.adjust_inventory(
            product_id=data.get("productId"),
            quantity=data.get("quantity"),
            adjustment_type=data.get("type"),
            notes=data.get("notes"),
            actor_user_id=g.current_user.id,
        )
        g.activity_entity = ("Product", product["id"])
        g.activity_description = (
            f"Inventory {log.type}: {product['name']} {product['previousStock']} -> {product['currentStock']}"
        )
        return jsonify({
            "message": "Inventory adjusted successfully",
            "log": log.to_dict(),
            "product": product,
        }), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to adjust inventory")
        return jsonify({"message": "Internal server error"}), 500


@inventory_bp.get("/summary")
@require_auth
@require_permission("VIEW_INVENTORY")
def summary_route():
    """Stock counts and valuation per category and overall (active products)."""
    try:
        return jsonify(inventory_service.get_inventory_summary()), 200
    except Exception:
        current_app.logger.exception("Failed to build inventory summary")
        return jsonify({"message": "Internal server error"}), 500


@inventory_bp.get("/movements/<int:product_id>")
@require_auth
@require_permission("VIEW_INVENTORY")
def movements_route(product_id: int):
    """Latest 100 ledger entries for one product."""
    try:
        start, end = parse_date_range(request.args.get("startDate"), request.args.get("endDate"))
        product, movements = inventory_service.get_product_movements(product_id, start=start, end=end)
        return jsonify({
            "product": {
                "id": product.id,
                "name": product.name,
                "sku": product.sku,
                "currentStock": product.stock,
            },
            "movements": [m.to_dict() for m in movements],
        }), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to fetch inventory movements")
        return jsonify({"message": "Internal server error"}), 500

# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/storefront/routes/sales.py
"""Sales API routes with permission enforcement"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import log_activity, require_auth, require_permission
from ..errors import PosError, error_response
from ..services import permission_service, sales_service
from ..services.query_utils import page_response, parse_date_range, parse_page_args

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _can_view_all_sales() -> bool:
    return permission_service.user_has_permission(g.current_user, "VIEW_ALL_SALES")


@sales_bp.get("")
@require_auth
@require_permission("CREATE_SALE")
def list_sales_route():
    """
    List sales, newest first.

    Without VIEW_ALL_SALES (cashiers) only the caller's own sales are listed.
    Query params: startDate, endDate, paymentStatus, status, page, limit
    """
    try:
        page, limit = parse_page_args(request.args)
        start, end = parse_date_range(request.args.get("startDate"), request.args.get("endDate"))
        result = sales_service.list_sales(
            start=start,
            end=end,
            payment_status=request.args.get("paymentStatus") or None,
            status=request.args.get("status") or None,
            sold_by_user_id=None if _can_view_all_sales() else g.current_user.id,
            page=page,
            limit=limit,
        )
        return jsonify(page_response("sales", result)), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list sales")
        return jsonify({"message": "Internal server error"}), 500


@sales_bp.get("/stats/summary")
@require_auth
@require_permission("VIEW_SALES_REPORTS")
def sales_stats_route():
    """Count, revenue, paid, due and average over completed sales."""
    try:
        start, end = parse_date_range(request.args.get("startDate"), request.args.get("endDate"))
        return jsonify({"stats": sales_service.get_sales_stats(start=start, end=end)}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to fetch sales statistics")
        return jsonify({"message": "Internal server error"}), 500


@sales_bp.get("/<int:sale_id>")
@require_auth
@require_permission("CREATE_SALE")
def get_sale_route(sale_id: int):
    try:
        sale = sales_service.get_sale(sale_id)
        if sale.sold_by_user_id != g.current_user.id and not _can_view_all_sales():
            return jsonify({"message": "Permission denied"}), 403
        return jsonify({"sale": sale.to_dict()}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to fetch sale")
        return jsonify({"message": "Internal server error"}), 500


@sales_bp.post("")
@require_auth
@require_permission("CREATE_SALE")
@log_activity("create_sale", "sales")
def create_sale_route():
    """
    Post a sale: price the cart, decrement stock, write ledger entries.

    Body: {items: [{product, quantity, discount?}], customer?, paymentMethod,
           tax?, discount?, notes?, amountPaid?}

    Requires: CREATE_SALE permission
    Available to: admin, manager, cashier
    """
    try:
        sale = sales_service.post_sale(request.get_json(silent=True), g.current_user.id)
        g.activity_entity = ("Sale", sale.id)
        g.activity_description = f"Sale {sale.invoice_number} created"
        return jsonify({"message": "Sale created successfully", "sale": sale.to_dict()}), 201
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"message": "Internal server error"}), 500


@sales_bp.put("/<int:sale_id>")
@require_auth
@require_permission("EDIT_SALE")
@log_activity("update_sale", "sales")
def update_sale_route(sale_id: int):
    """
    Edit customer, notes, paymentStatus or amountPaid.

    Requires: EDIT_SALE permission
    Available to: admin, manager
    """
    try:
        sale = sales_service.update_sale(sale_id, request.get_json(silent=True))
        g.activity_entity = ("Sale", sale.id)
        return jsonify({"message": "Sale updated successfully", "sale": sale.to_dict()}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update sale")
        return jsonify({"message": "Internal server error"}), 500


@sales_bp.post("/<int:sale_id>/cancel")
@require_auth
@require_permission("CANCEL_SALE")
@log_activity("cancel_sale", "sales")
def cancel_sale_route(sale_id: int):
    """
    Cancel a completed sale and restore its stock.

    Body: {reason?}

    Requires: CANCEL_SALE permission
    Available to: admin, manager
    """
    try:
        data = request.get_json(silent=True) or {}
        sale = sales_service.cancel_sale(sale_id, data.get("reason"), g.current_user.id)
        g.activity_entity = ("Sale", sale.id)
        g.activity_description = f"Sale {sale.invoice_number} cancelled"
        return jsonify({"message": "Sale cancelled successfully", "sale": sale.to_dict()}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to cancel sale")
        return jsonify({"message": "Internal server error"}), 500

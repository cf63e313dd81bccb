# Overview: Flask API routes for dashboard aggregates.

# backend/storefront/routes/dashboard.py

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth, require_permission
from ..errors import PosError, error_response
from ..services import reporting_service
from ..services.query_utils import parse_date_range

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/stats")
@require_auth
@require_permission("VIEW_SALES_REPORTS")
def dashboard_stats_route():
    try:
        return jsonify(reporting_service.get_dashboard_stats()), 200
    except Exception:
        current_app.logger.exception("Failed to fetch dashboard stats")
        return jsonify({"message": "Internal server error"}), 500


@dashboard_bp.get("/sales-by-category")
@require_auth
@require_permission("VIEW_SALES_REPORTS")
def sales_by_category_route():
    try:
        start, end = parse_date_range(request.args.get("startDate"), request.args.get("endDate"))
        rows = reporting_service.get_sales_by_category(start=start, end=end)
        return jsonify({"salesByCategory": rows}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to fetch sales by category")
        return jsonify({"message": "Internal server error"}), 500

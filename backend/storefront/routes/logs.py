# Overview: Flask API routes for the activity audit trail.

# backend/storefront/routes/logs.py

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth, require_permission
from ..errors import PosError, error_response
from ..services import activity_service
from ..services.query_utils import page_response, parse_date_range, parse_page_args

logs_bp = Blueprint("logs", __name__, url_prefix="/api/logs")


@logs_bp.get("/activity")
@require_auth
@require_permission("VIEW_AUDIT_LOG")
def list_activity_route():
    """
    Activity entries, newest first.

    Query params: userId, action, module, startDate, endDate, page, limit (default 50)
    """
    try:
        page, limit = parse_page_args(request.args, default_limit=50)
        start, end = parse_date_range(request.args.get("startDate"), request.args.get("endDate"))
        result = activity_service.list_activity_logs(
            user_id=request.args.get("userId", type=int),
            action=request.args.get("action") or None,
            module=request.args.get("module") or None,
            start=start,
            end=end,
            page=page,
            limit=limit,
        )
        return jsonify(page_response("logs", result)), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list activity logs")
        return jsonify({"message": "Internal server error"}), 500


@logs_bp.get("/activity/user/<int:user_id>")
@require_auth
@require_permission("VIEW_AUDIT_LOG")
def user_activity_summary_route(user_id: int):
    try:
        start, end = parse_date_range(request.args.get("startDate"), request.args.get("endDate"))
        summary = activity_service.get_user_activity_summary(user_id, start, end)
        return jsonify({"summary": summary}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to fetch user activity summary")
        return jsonify({"message": "Internal server error"}), 500


@logs_bp.get("/activity/stats")
@require_auth
@require_permission("VIEW_AUDIT_STATS")
def activity_stats_route():
    try:
        start, end = parse_date_range(request.args.get("startDate"), request.args.get("endDate"))
        return jsonify(activity_service.get_activity_stats(start, end)), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to fetch activity stats")
        return jsonify({"message": "Internal server error"}), 500

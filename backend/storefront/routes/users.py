# Overview: Flask API routes for employee management (admin only).

# backend/storefront/routes/users.py

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..errors import PosError, error_response
from ..services import activity_service, user_service

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


def _record(action: str, description: str, user_id: int) -> None:
    activity_service.log_activity(
        g.current_user.id,
        action,
        "users",
        description,
        entity_type="User",
        entity_id=user_id,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )


@users_bp.get("")
@require_auth
@require_permission("MANAGE_USERS")
def list_users_route():
    users = user_service.list_users()
    return jsonify({"users": [u.to_dict() for u in users]}), 200


@users_bp.get("/<int:user_id>")
@require_auth
@require_permission("MANAGE_USERS")
def get_user_route(user_id: int):
    try:
        return jsonify({"user": user_service.get_user(user_id).to_dict()}), 200
    except PosError as e:
        return error_response(e)


@users_bp.post("")
@require_auth
@require_permission("MANAGE_USERS")
def create_user_route():
    """
    Add an employee.

    Body: {name, email, password, role}
    """
    try:
        user = user_service.create_user(request.get_json(silent=True))
        _record("create_user", f"New employee added: {user.name} ({user.role})", user.id)
        return jsonify({"message": "Employee added successfully", "user": user.to_dict()}), 201
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"message": "Internal server error"}), 500


@users_bp.put("/<int:user_id>")
@require_auth
@require_permission("MANAGE_USERS")
def update_user_route(user_id: int):
    try:
        user = user_service.update_user(user_id, request.get_json(silent=True))
        _record("update_user", f"Employee updated: {user.name}", user.id)
        return jsonify({"message": "Employee updated successfully", "user": user.to_dict()}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update user")
        return jsonify({"message": "Internal server error"}), 500


@users_bp.put("/<int:user_id>/deactivate")
@require_auth
@require_permission("MANAGE_USERS")
def deactivate_user_route(user_id: int):
    try:
        user = user_service.deactivate_user(user_id, g.current_user.id)
        _record("deactivate_user", f"Employee deactivated: {user.name}", user.id)
        return jsonify({"message": "Employee deactivated successfully"}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to deactivate user")
        return jsonify({"message": "Internal server error"}), 500


@users_bp.delete("/<int:user_id>")
@require_auth
@require_permission("MANAGE_USERS")
def delete_user_route(user_id: int):
    """Permanently delete an employee. Admins cannot delete themselves."""
    try:
        name = user_service.delete_user(user_id, g.current_user.id)
        _record("delete_user", f"Employee permanently deleted: {name}", user_id)
        return jsonify({"message": "Employee permanently deleted"}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete user")
        return jsonify({"message": "Internal server error"}), 500

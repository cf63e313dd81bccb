# Overview: Flask API routes for product categories.

# backend/storefront/routes/categories.py

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_permission
from ..errors import PosError, error_response
from ..services import category_service

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
@require_auth
@require_permission("VIEW_PRODUCTS")
def list_categories_route():
    """Active categories, by display name."""
    categories = category_service.list_categories()
    return jsonify({"categories": [c.to_dict() for c in categories]}), 200


@categories_bp.get("/all")
@require_auth
@require_permission("MANAGE_CATEGORIES")
def list_all_categories_route():
    """All categories including inactive ones."""
    categories = category_service.list_categories(include_inactive=True)
    return jsonify({"categories": [c.to_dict() for c in categories]}), 200


@categories_bp.post("")
@require_auth
@require_permission("MANAGE_CATEGORIES")
def create_category_route():
    try:
        category = category_service.create_category(request.get_json(silent=True), g.current_user.id)
        return jsonify({"message": "Category created successfully", "category": category.to_dict()}), 201
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create category")
        return jsonify({"message": "Internal server error"}), 500


@categories_bp.put("/<int:category_id>")
@require_auth
@require_permission("MANAGE_CATEGORIES")
def update_category_route(category_id: int):
    try:
        category = category_service.update_category(category_id, request.get_json(silent=True))
        return jsonify({"message": "Category updated successfully", "category": category.to_dict()}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update category")
        return jsonify({"message": "Internal server error"}), 500


@categories_bp.delete("/<int:category_id>")
@require_auth
@require_permission("DELETE_CATEGORY")
def delete_category_route(category_id: int):
    """
    Permanently delete a category.

    Requires: DELETE_CATEGORY permission
    Available to: admin
    """
    try:
        category_service.delete_category(category_id)
        return jsonify({"message": "Category permanently deleted"}), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete category")
        return jsonify({"message": "Internal server error"}), 500

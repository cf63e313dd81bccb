# Overview: Flask API routes for invoice lookup (read-only view of sales).

# backend/storefront/routes/invoices.py

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth, require_permission
from ..errors import NotFoundError, PosError, error_response
from ..services import sales_service
from ..services.query_utils import page_response, parse_page_args

invoices_bp = Blueprint("invoices", __name__, url_prefix="/api/invoices")


@invoices_bp.get("")
@require_auth
@require_permission("CREATE_SALE")
def list_invoices_route():
    """Search by invoice number, customer name or phone. Query params: search, page, limit"""
    try:
        page, limit = parse_page_args(request.args)
        result = sales_service.search_invoices(search=request.args.get("search"), page=page, limit=limit)
        return jsonify(page_response("invoices", result)), 200
    except PosError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list invoices")
        return jsonify({"message": "Internal server error"}), 500


@invoices_bp.get("/<int:sale_id>")
@require_auth
@require_permission("CREATE_SALE")
def get_invoice_route(sale_id: int):
    try:
        invoice = sales_service.get_sale(sale_id)
    except NotFoundError:
        return jsonify({"message": "Invoice not found"}), 404
    return jsonify({"invoice": invoice.to_dict()}), 200


@invoices_bp.get("/number/<string:invoice_number>")
@require_auth
@require_permission("CREATE_SALE")
def get_invoice_by_number_route(invoice_number: str):
    try:
        invoice = sales_service.get_sale_by_invoice_number(invoice_number)
        return jsonify({"invoice": invoice.to_dict()}), 200
    except PosError as e:
        return error_response(e)

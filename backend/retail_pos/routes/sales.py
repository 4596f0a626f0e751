# Overview: Flask API routes for the sales ledger; parses input and returns JSON responses.

# backend/retail_pos/routes/sales.py
"""Transaction ledger routes. Any signed-in role may record and read sales."""

from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_role
from ..errors import ValidationError
from ..models import ROLE_STAFF
from ..services.container import get_services


sales_bp = Blueprint("sales", __name__, url_prefix="/api/transactions")


@sales_bp.post("")
@require_auth
@require_role(ROLE_STAFF)
def record_sale_route():
    """
    Record a completed sale.

    Request body:
    - productName: str
    - quantity: int > 0
    - totalPrice: number > 0

    Stock is not touched here; call POST /api/products/<id>/reduce-stock.
    """
    data = request.get_json(silent=True) or {}

    try:
        trx = get_services().ledger.record_sale(data)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(trx.to_dict()), 201


@sales_bp.get("")
@require_auth
@require_role(ROLE_STAFF)
def list_sales_route():
    """All sales, most recent first."""
    return jsonify([t.to_dict() for t in get_services().ledger.list_sales()])

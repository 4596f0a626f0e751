# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/retail_pos/routes/products.py
"""
Product catalog routes.

- Reads are public
- Create, update and delete require the admin role
- Stock reduction requires any signed-in role

Create and update accept either JSON or multipart/form-data; in the multipart
case an optional "image" file part is stored before the product row is written.
"""
from flask import Blueprint, request, jsonify, send_file
from io import BytesIO
import mimetypes

from ..decorators import require_auth, require_role
from ..errors import (
    ValidationError,
    NotFound,
    InsufficientStock,
    StorageWriteFailed,
    PersistenceError,
)
from ..models import ROLE_ADMIN, ROLE_STAFF
from ..services.container import get_services
from ..services.products_service import ImageUpload

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _product_payload() -> dict:
    if request.mimetype == "multipart/form-data" or request.form:
        return request.form.to_dict()
    return request.get_json(silent=True) or {}


def _image_upload() -> ImageUpload | None:
    file = request.files.get("image")
    if file is None or not file.filename:
        return None
    return ImageUpload(data=file.read(), filename=file.filename)


@products_bp.get("")
def list_products():
    """List all products, newest first."""
    products = get_services().catalog.list_products()
    return jsonify([p.to_dict() for p in products])


@products_bp.get("/<int:product_id>")
def get_product(product_id: int):
    try:
        p = get_services().catalog.get_product(product_id)
    except NotFound as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(p.to_dict())


@products_bp.get("/<int:product_id>/image")
def get_product_image(product_id: int):
    """Image bytes for a product, whichever storage backend holds them."""
    services = get_services()
    try:
        p = services.catalog.get_product(product_id)
        data = services.storage.open(p.image)
    except NotFound as e:
        return jsonify({"error": str(e)}), 404

    mimetype = mimetypes.guess_type(p.image)[0] or "application/octet-stream"
    return send_file(BytesIO(data), mimetype=mimetype)


@products_bp.post("")
@require_auth
@require_role(ROLE_ADMIN)
def create_product_route():
    """
    Create a new product.

    Fields: name (required), price (required, > 0), stock (required, >= 0),
    description, unit. Optional multipart file part: image.
    """
    try:
        created = get_services().catalog.create_product(_product_payload(), _image_upload())
    except (ValidationError, StorageWriteFailed) as e:
        return jsonify({"error": str(e)}), e.status_code

    return jsonify(created.to_dict()), 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_role(ROLE_ADMIN)
def update_product_route(product_id: int):
    """Partial update; only supplied fields change. Optional new image."""
    try:
        updated = get_services().catalog.update_product(product_id, _product_payload(), _image_upload())
    except (ValidationError, NotFound, StorageWriteFailed) as e:
        return jsonify({"error": str(e)}), e.status_code

    return jsonify(updated.to_dict()), 200


@products_bp.delete("/<int:product_id>")
@require_auth
@require_role(ROLE_ADMIN)
def delete_product_route(product_id: int):
    """Delete a product. Unknown ids succeed as well (idempotent)."""
    get_services().catalog.delete_product(product_id)
    return jsonify({"message": "Product deleted"}), 200


@products_bp.post("/<int:product_id>/reduce-stock")
@require_auth
@require_role(ROLE_STAFF)
def reduce_stock_route(product_id: int):
    """
    Atomically reduce stock.

    Request body:
    - quantity: int > 0
    """
    data = request.get_json(silent=True) or {}

    try:
        current_stock = get_services().catalog.reduce_stock(product_id, data.get("quantity"))
    except (ValidationError, NotFound, InsufficientStock, PersistenceError) as e:
        return jsonify({"error": str(e)}), e.status_code

    return jsonify({"message": "Stock reduced", "currentStock": current_stock}), 200

# Overview: Flask API routes for user management; parses input and returns JSON responses.

# backend/retail_pos/routes/users.py
"""
User management routes (admin only).

Responses never include password hashes.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_role
from ..errors import DuplicateUsername, NotFound, ValidationError
from ..models import ROLE_ADMIN
from ..services.container import get_services

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_role(ROLE_ADMIN)
def list_users():
    """List users, newest first."""
    users = get_services().credentials.list_users()
    return jsonify([u.to_dict() for u in users])


@users_bp.get("/<int:user_id>")
@require_auth
@require_role(ROLE_ADMIN)
def get_user(user_id: int):
    try:
        user = get_services().credentials.get_user(user_id)
    except NotFound as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(user.to_dict())


@users_bp.put("/<int:user_id>")
@require_auth
@require_role(ROLE_ADMIN)
def update_user(user_id: int):
    """
    Update a user.

    Request body (all optional):
    - username: str
    - password: str (re-hashed, never stored as given)
    - role: "staff" | "admin"
    """
    data = request.get_json(silent=True) or {}

    try:
        user = get_services().credentials.update_credentials(
            user_id,
            new_username=data.get("username"),
            new_password=data.get("password"),
            new_role=data.get("role"),
        )
    except (ValidationError, DuplicateUsername) as e:
        return jsonify({"error": str(e)}), 400
    except NotFound as e:
        return jsonify({"error": str(e)}), 404

    return jsonify(user.to_dict()), 200


@users_bp.delete("/<int:user_id>")
@require_auth
@require_role(ROLE_ADMIN)
def delete_user(user_id: int):
    """Delete a user. Admins cannot delete their own account."""
    if user_id == g.claims.user_id:
        return jsonify({"error": "Cannot delete your own account"}), 400

    get_services().credentials.delete_user(user_id)
    return jsonify({"message": "User deleted"}), 200

# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/retail_pos/routes/auth.py
"""
Authentication API routes

- Registration creates staff accounts; admin accounts need an admin token,
  except for the very first admin (bootstrap)
- The bootstrap check is not atomic: two unauthenticated admin registrations
  racing on an empty database can both succeed. Deployments should create the
  first admin with `flask users create-admin` before exposing the API.
- Login returns a signed, stateless session token
- Unknown usernames and wrong passwords produce the same 401 response
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, current_claims
from ..errors import DuplicateUsername, InvalidCredentials, ValidationError
from ..models import ROLE_ADMIN
from ..services.container import get_services


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    """
    Create a user account.

    Request body:
    - username: str (required)
    - password: str (required)
    - role: "staff" | "admin" (optional, default "staff")
    """
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")
    role = data.get("role")

    credentials = get_services().credentials

    if role == ROLE_ADMIN:
        claims = current_claims()
        is_admin_caller = claims is not None and claims.role == ROLE_ADMIN
        if not is_admin_caller and credentials.admin_exists():
            return jsonify({"error": "Only an admin can create admin accounts"}), 403

    try:
        user_id = credentials.register(username, password, role)
    except (ValidationError, DuplicateUsername) as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"message": "User created", "id": user_id}), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and issue a session token.

    The token must be sent as "Authorization: Bearer <token>" on protected routes.
    """
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")

    if not username or not password:
        return jsonify({"error": "username and password required"}), 400

    try:
        result = get_services().credentials.authenticate(username, password)
    except InvalidCredentials as e:
        return jsonify({"error": str(e)}), 401

    return jsonify(result.to_dict()), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    """Claims carried by the presented token."""
    return jsonify(g.claims.to_dict())

# Overview: Request and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .errors import Forbidden, InvalidToken
from .services.container import get_services


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def _is_authenticated() -> bool:
    return getattr(g, "claims", None) is not None


def current_claims():
    """
    Claims of a valid bearer token on the current request, or None.

    For routes that are public but behave differently for signed-in callers.
    """
    token = _bearer_token()
    if token is None:
        return None
    try:
        return get_services().gate.authorize(token)
    except InvalidToken:
        return None


def require_auth(f):
    """
    Require a valid signed session token.

    Sets g.claims (SessionClaims: user_id, role). No database lookup happens;
    the token alone is the credential.

    SECURITY: Returns 401 if:
    - No Authorization header
    - Malformed, tampered or expired token
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if token is None:
            return jsonify({"error": "Authentication required"}), 401

        try:
            claims = get_services().gate.authorize(token)
        except InvalidToken as e:
            return jsonify({"error": str(e)}), 401

        g.claims = claims
        return f(*args, **kwargs)

    return decorated_function


def require_role(role: str):
    """
    Require the authenticated caller's role to satisfy `role`.

    Must be stacked under @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            token = _bearer_token()
            if not _is_authenticated() or token is None:
                return jsonify({"error": "Authentication required"}), 401

            try:
                g.claims = get_services().gate.authorize(token, role)
            except InvalidToken as e:
                return jsonify({"error": str(e)}), 401
            except Forbidden:
                return jsonify({
                    "error": "Permission denied",
                    "required_role": role,
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator

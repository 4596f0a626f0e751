# Overview: Stateless signed session tokens; encapsulates issuing and verifying.

"""
Session Token Service

Tokens are signed, self-contained credentials: the payload carries the user id
and role, and the signature plus the embedded signing time are all that is
needed to verify one. There is no server-side session table.

SECURITY NOTES:
- Signed with HMAC (itsdangerous) using the process-wide SECRET_KEY
- A salt namespaces session tokens away from any other signed value
- Rejected once older than the configured max age
- Revocation is coarse: rotating SECRET_KEY invalidates every token
"""

from __future__ import annotations

from dataclasses import dataclass

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..errors import InvalidToken
from ..models import ROLES

TOKEN_SALT = "retail-pos-session"


@dataclass(frozen=True)
class SessionClaims:
    """Identity decoded from a verified token."""
    user_id: int
    role: str

    def to_dict(self) -> dict:
        return {"user_id": self.user_id, "role": self.role}


def _serializer(secret_key: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)


def issue_token(user_id: int, role: str, *, secret_key: str) -> str:
    """Sign {uid, role}; the signing timestamp is embedded by the serializer."""
    return _serializer(secret_key).dumps({"uid": user_id, "role": role})


def verify_token(token: str, *, secret_key: str, max_age: int | None) -> SessionClaims:
    """
    Pure verification: token + secret -> claims, or InvalidToken.

    Raises InvalidToken if the token is malformed, tampered with, signed by a
    different key, expired, or carries claims of the wrong shape.
    """
    if not token or not isinstance(token, str):
        raise InvalidToken("Missing token")

    try:
        payload = _serializer(secret_key).loads(token, max_age=max_age)
    except SignatureExpired:
        raise InvalidToken("Token expired")
    except BadSignature:
        raise InvalidToken("Invalid token")

    if not isinstance(payload, dict):
        raise InvalidToken("Invalid token")

    user_id = payload.get("uid")
    role = payload.get("role")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or role not in ROLES:
        raise InvalidToken("Invalid token")

    return SessionClaims(user_id=user_id, role=role)


class TokenSigner:
    """Binds the signing secret and max age chosen at startup."""

    def __init__(self, *, secret_key: str, max_age: int | None):
        if not secret_key:
            raise ValueError("secret_key is required to sign tokens")
        self.secret_key = secret_key
        self.max_age = max_age

    def issue(self, user_id: int, role: str) -> str:
        return issue_token(user_id, role, secret_key=self.secret_key)

    def verify(self, token: str) -> SessionClaims:
        return verify_token(token, secret_key=self.secret_key, max_age=self.max_age)

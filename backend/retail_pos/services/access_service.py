# Overview: Access control gate; maps a bearer token to claims and enforces roles.

from __future__ import annotations

from ..errors import Forbidden
from ..models import ROLES
from .session_service import SessionClaims, TokenSigner


def role_satisfies(actual: str, required: str) -> bool:
    """Roles are ranked staff < admin; a higher role satisfies a lower requirement."""
    if required not in ROLES:
        raise ValueError(f"Unknown role {required!r}")
    if actual not in ROLES:
        return False
    return ROLES.index(actual) >= ROLES.index(required)


class AccessGate:
    """
    Stateless authorization.

    Verification depends only on the token and the signing secret held by the
    TokenSigner; no database lookup happens here.
    """

    def __init__(self, signer: TokenSigner):
        self.signer = signer

    def authorize(self, token: str, required_role: str | None = None) -> SessionClaims:
        """
        Raises InvalidToken if the token does not verify, Forbidden if a
        required role is given and the token's role does not satisfy it.
        """
        claims = self.signer.verify(token)

        if required_role is not None and not role_satisfies(claims.role, required_role):
            raise Forbidden(f"Requires role: {required_role}")

        return claims

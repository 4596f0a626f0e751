"""
Token verification and access control tests.

Verification is a pure function of token + secret; these tests never touch
the database.
"""

import pytest

from retail_pos.errors import Forbidden, InvalidToken
from retail_pos.models import ROLE_ADMIN, ROLE_STAFF
from retail_pos.services.access_service import AccessGate, role_satisfies
from retail_pos.services.session_service import TokenSigner, issue_token, verify_token

SECRET = "unit-test-secret"


class TestVerifyToken:
    def test_round_trip(self):
        token = issue_token(7, ROLE_STAFF, secret_key=SECRET)

        claims = verify_token(token, secret_key=SECRET, max_age=60)

        assert claims.user_id == 7
        assert claims.role == ROLE_STAFF

    def test_tampered_token_rejected(self):
        token = issue_token(7, ROLE_STAFF, secret_key=SECRET)
        forged_payload = issue_token(7, ROLE_ADMIN, secret_key="attacker").split(".")[0]
        tampered = ".".join([forged_payload] + token.split(".")[1:])

        with pytest.raises(InvalidToken):
            verify_token(tampered, secret_key=SECRET, max_age=60)

    def test_other_secret_rejected(self):
        token = issue_token(7, ROLE_ADMIN, secret_key="someone-else")

        with pytest.raises(InvalidToken):
            verify_token(token, secret_key=SECRET, max_age=60)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c", None])
    def test_malformed_rejected(self, token):
        with pytest.raises(InvalidToken):
            verify_token(token, secret_key=SECRET, max_age=60)

    def test_expired_rejected(self):
        token = issue_token(7, ROLE_STAFF, secret_key=SECRET)

        with pytest.raises(InvalidToken):
            verify_token(token, secret_key=SECRET, max_age=-1)

    def test_unknown_role_in_payload_rejected(self):
        token = issue_token(7, "superuser", secret_key=SECRET)

        with pytest.raises(InvalidToken):
            verify_token(token, secret_key=SECRET, max_age=60)


class TestAccessGate:
    @pytest.fixture
    def gate(self):
        return AccessGate(TokenSigner(secret_key=SECRET, max_age=3600))

    def test_no_required_role(self, gate):
        token = gate.signer.issue(3, ROLE_STAFF)
        assert gate.authorize(token).to_dict() == {"user_id": 3, "role": ROLE_STAFF}

    def test_staff_forbidden_from_admin(self, gate):
        token = gate.signer.issue(3, ROLE_STAFF)

        with pytest.raises(Forbidden):
            gate.authorize(token, ROLE_ADMIN)

    def test_admin_satisfies_staff(self, gate):
        token = gate.signer.issue(1, ROLE_ADMIN)
        assert gate.authorize(token, ROLE_STAFF).role == ROLE_ADMIN

    def test_invalid_token_before_role_check(self, gate):
        with pytest.raises(InvalidToken):
            gate.authorize("not-a-token", ROLE_STAFF)


def test_role_ranking():
    assert role_satisfies(ROLE_ADMIN, ROLE_ADMIN)
    assert role_satisfies(ROLE_ADMIN, ROLE_STAFF)
    assert role_satisfies(ROLE_STAFF, ROLE_STAFF)
    assert not role_satisfies(ROLE_STAFF, ROLE_ADMIN)
    assert not role_satisfies("guest", ROLE_STAFF)


def test_signer_requires_secret():
    with pytest.raises(ValueError):
        TokenSigner(secret_key="", max_age=60)

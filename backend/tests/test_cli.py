"""
CLI command tests.

`flask users create-admin` is the supported way to create the first admin
before the API is exposed.
"""

from retail_pos.extensions import db
from retail_pos.models import ROLE_ADMIN, User


def test_create_admin_then_api_bootstrap_closed(app, client):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["users", "create-admin", "--username", "owner", "--password", "owner-pass-123"])

    assert result.exit_code == 0, result.output
    assert "Created admin 'owner'" in result.output
    db.session.expire_all()
    assert db.session.query(User).filter_by(username="owner").one().role == ROLE_ADMIN

    resp = client.post(
        "/api/auth/register",
        json={"username": "late", "password": "late-pass-123", "role": "admin"},
    )
    assert resp.status_code == 403


def test_create_admin_duplicate_fails(app, admin_user):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["users", "create-admin", "--username", "admin", "--password", "other-pass-123"])

    assert result.exit_code != 0
    assert "already exists" in result.output


def test_users_list(app, admin_user, staff_user):
    result = app.test_cli_runner().invoke(args=["users", "list"])

    assert result.exit_code == 0
    assert "admin" in result.output
    assert "kasir" in result.output

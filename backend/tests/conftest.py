"""
Pytest fixtures for the retail POS backend tests.

Provides an application bound to a throwaway SQLite file, a local upload
folder under tmp_path, a test client and authentication helpers.
"""

import pytest

from retail_pos import create_app
from retail_pos.extensions import db
from retail_pos.models import ROLE_ADMIN, ROLE_STAFF
from retail_pos.services.container import get_services

ADMIN_PASSWORD = "admin-pass-123"
STAFF_PASSWORD = "staff-pass-123"


def make_app(tmp_path, storage=None, **overrides):
    config = {
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'test.sqlite3'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {
            'connect_args': {'timeout': 30, 'check_same_thread': False},
        },
        'STORAGE_BACKEND': 'local',
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'BCRYPT_ROUNDS': 4,
        'PASSWORD_MIN_LENGTH': 6,
    }
    config.update(overrides)
    return create_app(config, storage=storage)


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing with a fresh schema."""
    app = make_app(tmp_path)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def services(app):
    return get_services()


@pytest.fixture(scope='function')
def admin_user(services):
    user_id = services.credentials.register("admin", ADMIN_PASSWORD, ROLE_ADMIN)
    return user_id


@pytest.fixture(scope='function')
def staff_user(services):
    user_id = services.credentials.register("kasir", STAFF_PASSWORD, ROLE_STAFF)
    return user_id


@pytest.fixture(scope='function')
def admin_headers(client, admin_user):
    return auth_headers(get_auth_token(client, "admin", ADMIN_PASSWORD))


@pytest.fixture(scope='function')
def staff_headers(client, staff_user):
    return auth_headers(get_auth_token(client, "kasir", STAFF_PASSWORD))


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}

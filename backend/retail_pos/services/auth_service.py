# Overview: Service-layer operations for auth; encapsulates credential storage and login.

"""
Credential Store

WHY: Every action must be attributable. Uses bcrypt for one-way password
hashing; plaintext passwords are never stored or logged.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Username uniqueness enforced by the users table constraint at write time
- Login failures for unknown users and wrong passwords take the same path:
  an unknown username is still checked against a dummy hash, and both raise
  the same InvalidCredentials error with the same message
- Session tokens are issued by the TokenSigner (see session_service.py)
"""

from __future__ import annotations

from dataclasses import dataclass

import bcrypt
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import DuplicateUsername, InvalidCredentials, NotFound, ValidationError
from ..models import User, ROLE_ADMIN, ROLE_STAFF, ROLES
from ..time_utils import utcnow
from .session_service import TokenSigner

USERNAME_MAX_LENGTH = 64


@dataclass(frozen=True)
class LoginResult:
    token: str
    user_id: int
    username: str
    role: str

    def to_dict(self) -> dict:
        return {"token": self.token, "role": self.role, "username": self.username}


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash password using bcrypt.

    WHY: Cost factor 12 provides good security/performance balance.
    Tests lower it through BCRYPT_ROUNDS.
    """
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() compares in constant time.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in the database
        return False


def normalize_username(username) -> str:
    if not isinstance(username, str) or not username.strip():
        raise ValidationError("username is required")
    username = username.strip()
    if len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(f"username exceeds max length {USERNAME_MAX_LENGTH}")
    return username


def normalize_role(role) -> str:
    if role is None or role == "":
        return ROLE_STAFF
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")
    return role


class CredentialStore:
    """Registration, login and credential updates for staff accounts."""

    def __init__(self, *, signer: TokenSigner, bcrypt_rounds: int = 12, password_min_length: int = 6):
        self.signer = signer
        self.bcrypt_rounds = bcrypt_rounds
        self.password_min_length = password_min_length
        # Checked against when the username is unknown so both failure paths
        # cost one bcrypt verification.
        self._dummy_hash = hash_password("retail-pos-dummy-password", rounds=bcrypt_rounds)

    def _validate_password(self, password) -> str:
        if not isinstance(password, str) or password == "":
            raise ValidationError("password is required")
        if len(password) < self.password_min_length:
            raise ValidationError(
                f"Password must be at least {self.password_min_length} characters long"
            )
        return password

    def register(self, username: str, password: str, role: str | None = None) -> int:
        """
        Create a user and return its id.

        Raises:
            ValidationError: blank username, short password or unknown role
            DuplicateUsername: username already taken (detected by the insert)
        """
        username = normalize_username(username)
        password = self._validate_password(password)
        role = normalize_role(role)

        user = User(
            username=username,
            password_hash=hash_password(password, rounds=self.bcrypt_rounds),
            role=role,
        )
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateUsername(f"Username '{username}' already exists")
        return user.id

    def authenticate(self, username: str, password: str) -> LoginResult:
        """
        Verify credentials and issue a signed session token.

        Raises InvalidCredentials for unknown usernames and wrong passwords alike.
        """
        if not isinstance(username, str) or not isinstance(password, str):
            raise InvalidCredentials()

        user = db.session.query(User).filter(User.username == username.strip()).first()

        if user is None:
            verify_password(password, self._dummy_hash)
            raise InvalidCredentials()

        if not verify_password(password, user.password_hash):
            raise InvalidCredentials()

        user.last_login_at = utcnow()
        db.session.commit()

        token = self.signer.issue(user.id, user.role)
        return LoginResult(token=token, user_id=user.id, username=user.username, role=user.role)

    def update_credentials(
        self,
        user_id: int,
        *,
        new_username: str | None = None,
        new_password: str | None = None,
        new_role: str | None = None,
    ) -> User:
        """Partial update; a new password is re-hashed before it touches the row."""
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")

        if new_username is not None:
            user.username = normalize_username(new_username)
        if new_password is not None and new_password != "":
            user.password_hash = hash_password(
                self._validate_password(new_password), rounds=self.bcrypt_rounds
            )
        if new_role is not None and new_role != "":
            user.role = normalize_role(new_role)

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateUsername(f"Username '{new_username}' already exists")
        return user

    def list_users(self) -> list[User]:
        return (
            db.session.query(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .all()
        )

    def get_user(self, user_id: int) -> User:
        user = db.session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def delete_user(self, user_id: int) -> bool:
        """Hard delete; returns False when there was nothing to delete."""
        deleted = db.session.query(User).filter(User.id == user_id).delete(synchronize_session=False)
        db.session.commit()
        return bool(deleted)

    def admin_exists(self) -> bool:
        return db.session.query(User.id).filter(User.role == ROLE_ADMIN).first() is not None

from ..extensions import db
from ..time_utils import to_utc_z

ROLE_STAFF = "staff"
ROLE_ADMIN = "admin"

# Ordered lowest privilege first
ROLES = (ROLE_STAFF, ROLE_ADMIN)


class User(db.Model):
    """
    Staff accounts for authentication and attribution.

    Username is globally unique; the constraint lives in the database so a
    concurrent duplicate insert fails instead of overwriting.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("username", name="uq_users_username"),
        db.CheckConstraint("role IN ('admin', 'staff')", name="ck_users_role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    username = db.Column(db.String(64), nullable=False, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default=ROLE_STAFF)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self) -> dict:
        # Never expose password_hash
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "last_login_at": to_utc_z(self.last_login_at),
        }

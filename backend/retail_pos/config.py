# backend/retail_pos/config.py
from __future__ import annotations
import os


def _default_storage_backend() -> str:
    # Production deployments upload to object storage; laptops write to disk.
    if os.environ.get("DEPLOY_ENV", "development").lower() == "production":
        return "s3"
    return "local"


class Config:
    # Optional "SECRET_KEY", with default dev key. Also signs session tokens.
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/retail_pos.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///retail_pos.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    DEPLOY_ENV = os.environ.get("DEPLOY_ENV", "development")

    # "local" or "s3"
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND") or _default_storage_backend()
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", "uploads")

    S3_BUCKET = os.environ.get("S3_BUCKET", "")
    S3_FOLDER = os.environ.get("S3_FOLDER", "retail_pos_production")
    S3_ENDPOINT_URL = os.environ.get("S3_ENDPOINT_URL") or None
    S3_REGION = os.environ.get("S3_REGION", "auto")
    S3_ACCESS_KEY_ID = os.environ.get("S3_ACCESS_KEY_ID", "")
    S3_SECRET_ACCESS_KEY = os.environ.get("S3_SECRET_ACCESS_KEY", "")
    # Public prefix for object URLs, e.g. a CDN or bucket website domain
    S3_PUBLIC_BASE_URL = os.environ.get("S3_PUBLIC_BASE_URL", "")

    TOKEN_MAX_AGE_SECONDS = int(os.environ.get("TOKEN_MAX_AGE_SECONDS", str(24 * 60 * 60)))
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))
    PASSWORD_MIN_LENGTH = int(os.environ.get("PASSWORD_MIN_LENGTH", "6"))

    # Cap multipart uploads at 5 MiB
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024

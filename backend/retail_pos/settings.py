# Overview: Explicit settings object handed to each component at construction.

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

STORAGE_LOCAL = "local"
STORAGE_S3 = "s3"
STORAGE_CHOICES = (STORAGE_LOCAL, STORAGE_S3)


@dataclass(frozen=True)
class AppSettings:
    """
    Immutable snapshot of the deployment configuration.

    Built once by create_app() from the Flask config. Components receive the
    fields they need through their constructors and never read app.config or
    os.environ themselves.
    """
    secret_key: str
    deploy_env: str
    storage_backend: str
    upload_folder: str
    token_max_age_seconds: int
    bcrypt_rounds: int
    password_min_length: int
    s3_bucket: str = ""
    s3_folder: str = "retail_pos_production"
    s3_endpoint_url: Optional[str] = None
    s3_region: str = "auto"
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_public_base_url: str = ""

    @property
    def is_production(self) -> bool:
        return self.deploy_env.lower() == "production"

    @classmethod
    def from_mapping(cls, config: Mapping) -> "AppSettings":
        storage_backend = str(config["STORAGE_BACKEND"]).lower()
        if storage_backend not in STORAGE_CHOICES:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {', '.join(STORAGE_CHOICES)}, got {storage_backend!r}"
            )

        return cls(
            secret_key=config["SECRET_KEY"],
            deploy_env=config.get("DEPLOY_ENV", "development"),
            storage_backend=storage_backend,
            upload_folder=config["UPLOAD_FOLDER"],
            token_max_age_seconds=int(config["TOKEN_MAX_AGE_SECONDS"]),
            bcrypt_rounds=int(config["BCRYPT_ROUNDS"]),
            password_min_length=int(config["PASSWORD_MIN_LENGTH"]),
            s3_bucket=config.get("S3_BUCKET", ""),
            s3_folder=config.get("S3_FOLDER", "retail_pos_production"),
            s3_endpoint_url=config.get("S3_ENDPOINT_URL"),
            s3_region=config.get("S3_REGION", "auto"),
            s3_access_key_id=config.get("S3_ACCESS_KEY_ID", ""),
            s3_secret_access_key=config.get("S3_SECRET_ACCESS_KEY", ""),
            s3_public_base_url=config.get("S3_PUBLIC_BASE_URL", ""),
        )

# Overview: Interchangeable image storage backends selected once at startup.

"""
Storage backends for product images.

Two backends share one interface:
1. LocalStorage - files on local disk, reference is the bare filename
2. S3Storage - objects in an S3-compatible bucket, reference is the public URL

Callers store bytes, keep the returned reference on the product row, and later
hand the same reference back to open(); they never need to know which backend
produced it. Write failures raise StorageWriteFailed so the product row is
never committed for an image that does not exist.
"""

from __future__ import annotations

import logging
import os
import time
import uuid
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from werkzeug.utils import secure_filename

from ..errors import NotFound, StorageWriteFailed, UnsupportedImageFormat
from ..settings import AppSettings, STORAGE_LOCAL, STORAGE_S3

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_FORMATS = frozenset({"jpg", "png", "jpeg", "webp"})

CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}


def file_extension(original_name: Optional[str]) -> str:
    """
    Extension of the uploaded name including the dot, '' if none.

    The suffix is taken from the raw name before sanitizing so a stem that
    secure_filename would drop entirely (non-ASCII names) keeps its extension.
    """
    base = (original_name or "").replace("\\", "/").rsplit("/", 1)[-1]
    suffix = os.path.splitext(base)[1].lstrip(".")
    cleaned = secure_filename(suffix)
    if not cleaned or cleaned != suffix or not cleaned.isalnum():
        return ""
    return "." + cleaned


class StorageBackend:
    """Base class for storage backends."""

    label = "Storage"

    def store(self, data: bytes, original_name: str) -> str:
        """
        Persist bytes and return a reference usable with open().

        Raises:
            StorageWriteFailed: the bytes could not be persisted
        """
        raise NotImplementedError

    def open(self, reference: str) -> bytes:
        """
        Return the bytes behind a reference produced by store().

        Raises:
            NotFound: the reference does not belong to this backend or is gone
        """
        raise NotImplementedError

    def describe(self) -> str:
        return self.label


class LocalStorage(StorageBackend):
    """
    Local filesystem storage backend.

    Files are named after the upload time in milliseconds plus the original
    extension. Existing files are never overwritten; a counter is appended
    when two uploads land in the same millisecond.
    """

    label = "Local Disk Storage"

    def __init__(self, base_path: str):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"LocalStorage initialized with base_path: {self.base_path}")

    def _candidate_names(self, ext: str):
        stamp = int(time.time() * 1000)
        yield f"{stamp}{ext}"
        counter = 1
        while True:
            yield f"{stamp}-{counter}{ext}"
            counter += 1

    def store(self, data: bytes, original_name: str) -> str:
        ext = file_extension(original_name)

        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
            for name in self._candidate_names(ext):
                destination = self.base_path / name
                try:
                    # "x" mode: fail instead of clobbering a concurrent upload
                    handle = open(destination, "xb")
                except FileExistsError:
                    continue
                try:
                    with handle:
                        handle.write(data)
                except OSError:
                    destination.unlink(missing_ok=True)
                    raise
                logger.info(f"LocalStorage: Stored {original_name!r} as {destination}")
                return name
        except OSError as e:
            logger.error(f"LocalStorage: Failed to store {original_name!r}: {e}")
            raise StorageWriteFailed(f"Could not write image to disk: {e.strerror or e}")


    def path_for(self, reference: str) -> Path:
        """Resolve a reference inside the upload directory, refusing traversal."""
        if not reference:
            raise NotFound("Image not found")
        base = self.base_path.resolve()
        candidate = (base / reference).resolve()
        if candidate.parent != base or not candidate.is_file():
            raise NotFound("Image not found")
        return candidate

    def open(self, reference: str) -> bytes:
        return self.path_for(reference).read_bytes()


class S3Storage(StorageBackend):
    """
    S3-compatible object storage backend.

    Objects live under a fixed logical folder in the bucket. Only the image
    formats in ALLOWED_IMAGE_FORMATS are accepted; the check happens before
    any network call.
    """

    label = "S3 Object Storage"

    def __init__(
        self,
        *,
        client,
        bucket_name: str,
        folder: str,
        public_base_url: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        region: str = "auto",
    ):
        if not bucket_name:
            raise ValueError("S3 bucket name is required")
        self.client = client
        self.bucket_name = bucket_name
        self.folder = folder.strip("/")
        self.url_prefix = self._url_prefix(public_base_url, endpoint_url, region)
        logger.info(f"S3Storage initialized with bucket: {self.bucket_name}")

    def _url_prefix(self, public_base_url, endpoint_url, region) -> str:
        if public_base_url:
            return public_base_url.rstrip("/") + "/"
        if endpoint_url:
            return f"{endpoint_url.rstrip('/')}/{self.bucket_name}/"
        region = region if region and region != "auto" else "us-east-1"
        return f"https://{self.bucket_name}.s3.{region}.amazonaws.com/"

    def describe(self) -> str:
        return f"{self.label} ({self.bucket_name})"

    def store(self, data: bytes, original_name: str) -> str:
        ext = file_extension(original_name)
        fmt = ext.lstrip(".").lower()
        if fmt not in ALLOWED_IMAGE_FORMATS:
            raise UnsupportedImageFormat(
                f"Image format not allowed; use one of: {', '.join(sorted(ALLOWED_IMAGE_FORMATS))}"
            )

        key = f"{self.folder}/{uuid.uuid4().hex}.{fmt}" if self.folder else f"{uuid.uuid4().hex}.{fmt}"

        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=CONTENT_TYPES[fmt],
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3Storage: Failed to upload {original_name!r} to {key}: {e}")
            raise StorageWriteFailed("Could not upload image to object storage")

        logger.info(f"S3Storage: Uploaded {original_name!r} to {key}")
        return self.url_prefix + key

    def key_for(self, reference: str) -> str:
        if not reference or not reference.startswith(self.url_prefix):
            raise NotFound("Image not found")
        key = reference[len(self.url_prefix):]
        if not key:
            raise NotFound("Image not found")
        return key

    def open(self, reference: str) -> bytes:
        key = self.key_for(reference)
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
            return response["Body"].read()
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code not in ("NoSuchKey", "404"):
                logger.error(f"S3Storage: Failed to read {key}: {e}")
            raise NotFound("Image not found")
        except BotoCoreError as e:
            logger.error(f"S3Storage: Failed to read {key}: {e}")
            raise NotFound("Image not available")


def build_storage_backend(settings: AppSettings) -> StorageBackend:
    """
    Factory: pick the backend once from the deployment settings.

    Raises:
        ValueError: unknown backend or incomplete S3 configuration
    """
    if settings.storage_backend == STORAGE_LOCAL:
        return LocalStorage(settings.upload_folder)

    if settings.storage_backend == STORAGE_S3:
        client = boto3.client(
            "s3",
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.s3_access_key_id or None,
            aws_secret_access_key=settings.s3_secret_access_key or None,
            region_name=settings.s3_region,
        )
        return S3Storage(
            client=client,
            bucket_name=settings.s3_bucket,
            folder=settings.s3_folder,
            public_base_url=settings.s3_public_base_url,
            endpoint_url=settings.s3_endpoint_url,
            region=settings.s3_region,
        )

    raise ValueError(f"Unknown storage backend type: {settings.storage_backend}")

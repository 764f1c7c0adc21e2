"""File storage abstraction. Local filesystem by default, S3 when configured."""
import logging
import os
from pathlib import Path
from typing import BinaryIO

import boto3
from botocore.exceptions import ClientError
from fastapi import Depends
from werkzeug.utils import secure_filename

from filestore.core.config import Settings, get_settings
from filestore.models.user import new_id

logger = logging.getLogger(__name__)


def upload_path(owner_id: str, filename: str) -> str:
    """Unique storage key for an uploaded file, grouped per owner.

    'test.png' -> '<owner_id>/<32 hex chars>_test.png'
    """
    return f"{owner_id}/{new_id()}_{secure_filename(filename) or 'upload'}"


def stored_filename(path: str) -> str:
    """Recover the sanitized upload name from a key built by upload_path."""
    name = path.rsplit("/", 1)[-1]
    prefix, sep, rest = name.partition("_")
    if sep and len(prefix) == 32:
        return rest
    return name


class FileStorage:
    """Interface shared by the storage backends. Paths are relative keys."""

    def save(self, path: str, data: bytes, content_type: str) -> None:
        raise NotImplementedError

    def open(self, path: str) -> BinaryIO:
        raise NotImplementedError

    def exists(self, path: str) -> bool:
        raise NotImplementedError

    def delete(self, path: str) -> None:
        raise NotImplementedError


class LocalStorage(FileStorage):
    """Stores files under a base directory on disk."""

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def full_path(self, path: str) -> Path:
        return self.base_dir / path

    def save(self, path: str, data: bytes, content_type: str) -> None:
        target = self.full_path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    def open(self, path: str) -> BinaryIO:
        return self.full_path(path).open("rb")

    def exists(self, path: str) -> bool:
        return self.full_path(path).is_file()

    def delete(self, path: str) -> None:
        target = self.full_path(path)
        if target.exists():
            os.remove(target)


class S3Storage(FileStorage):
    """Stores files as objects in a single bucket; the path is the object key."""

    def __init__(self, bucket_name: str, client=None):
        self.bucket_name = bucket_name
        self.s3 = client or boto3.client("s3")

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3Storage":
        client = boto3.client(
            "s3",
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region,
            endpoint_url=settings.aws_endpoint_url,
        )
        return cls(settings.aws_s3_bucket_name, client=client)

    def save(self, path: str, data: bytes, content_type: str) -> None:
        self.s3.put_object(
            Bucket=self.bucket_name,
            Key=path,
            Body=data,
            ContentType=content_type or "application/octet-stream",
        )

    def open(self, path: str) -> BinaryIO:
        try:
            obj = self.s3.get_object(Bucket=self.bucket_name, Key=path)
        except ClientError as e:
            raise FileNotFoundError(path) from e
        return obj["Body"]

    def exists(self, path: str) -> bool:
        try:
            self.s3.head_object(Bucket=self.bucket_name, Key=path)
        except ClientError as e:
            if e.response["Error"]["Code"] in ("404", "NoSuchKey"):
                return False
            raise
        return True

    def delete(self, path: str) -> None:
        # S3 delete_object is a no-op for missing keys
        self.s3.delete_object(Bucket=self.bucket_name, Key=path)


def build_storage(settings: Settings) -> FileStorage:
    if settings.storage_backend == "local":
        return LocalStorage(settings.upload_dir)
    if settings.storage_backend == "s3":
        if not settings.aws_s3_bucket_name:
            raise ValueError("AWS_S3_BUCKET_NAME is required for the s3 storage backend")
        return S3Storage.from_settings(settings)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


def get_storage(settings: Settings = Depends(get_settings)) -> FileStorage:
    """FastAPI dependency returning the configured storage backend."""
    return build_storage(settings)


def remove_stored_file(storage: FileStorage, path: str) -> bool:
    """Best-effort blob cleanup after a record is gone. Returns False on failure."""
    try:
        storage.delete(path)
    except (OSError, ClientError):
        # the record is already deleted, so only log this
        logger.warning("could not remove stored file %s", path, exc_info=True)
        return False
    return True

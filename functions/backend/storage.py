"""
Blob storage abstraction for Firebase Cloud Storage, S3-compatible buckets
(Tencent COS) and in-memory testing.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Dict, Protocol, Tuple
from urllib.parse import quote, urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError
from firebase_admin import storage as firebase_storage
from google.api_core import exceptions as gcloud_exceptions

from backend.errors import BlobNotFound
from shared.api import UploadedFile, UploadResult

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """Defines the operations the site needs from object storage."""

    def save(self, path: str, data: bytes, content_type: str) -> None:
        ...

    def make_public(self, path: str) -> None:
        ...

    def public_url(self, path: str) -> str:
        ...

    def delete(self, path: str) -> None:
        ...


@dataclass
class InMemoryBlobStore:
    """Test double for storage interactions."""

    base_url: str = "https://storage.example.test"
    stored_objects: Dict[str, Tuple[bytes, str]] = field(default_factory=dict)
    public_paths: set = field(default_factory=set)

    def save(self, path: str, data: bytes, content_type: str) -> None:
        self.stored_objects[path] = (bytes(data), content_type)

    def make_public(self, path: str) -> None:
        if path not in self.stored_objects:
            raise BlobNotFound(path)
        self.public_paths.add(path)

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{quote(path)}"

    def delete(self, path: str) -> None:
        if path not in self.stored_objects:
            raise BlobNotFound(path)
        del self.stored_objects[path]
        self.public_paths.discard(path)


@dataclass
class GcsBlobStore:
    """Firebase Cloud Storage bucket accessed through firebase_admin."""

    bucket_name: str

    def __post_init__(self):
        self._bucket = firebase_storage.bucket(self.bucket_name)

    def save(self, path: str, data: bytes, content_type: str) -> None:
        self._bucket.blob(path).upload_from_string(data, content_type=content_type)

    def make_public(self, path: str) -> None:
        self._bucket.blob(path).make_public()

    def public_url(self, path: str) -> str:
        return self._bucket.blob(path).public_url

    def delete(self, path: str) -> None:
        try:
            self._bucket.blob(path).delete()
        except gcloud_exceptions.NotFound as e:
            raise BlobNotFound(path) from e


def _cos_client(endpoint: str, region: str, access_key_id: str, secret_access_key: str):
    return boto3.client(
        "s3",
        endpoint_url=endpoint,
        region_name=region,
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
        # COS only accepts virtual-hosted style requests.
        config=Config(s3={"addressing_style": "virtual"}, signature_version="s3v4"),
    )


@dataclass
class CosBlobStore:
    """Band uploads kept in a Tencent COS bucket through its S3 API."""

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str

    def __post_init__(self):
        self._client = _cos_client(
            self.endpoint, self.region, self.access_key_id, self.secret_access_key
        )

    def save(self, path: str, data: bytes, content_type: str) -> None:
        self._client.put_object(
            Bucket=self.bucket, Key=path, Body=data, ContentType=content_type
        )

    def make_public(self, path: str) -> None:
        self._client.put_object_acl(Bucket=self.bucket, Key=path, ACL="public-read")

    def public_url(self, path: str) -> str:
        host = urlparse(self.endpoint).netloc or self.endpoint
        return f"https://{self.bucket}.{host}/{quote(path)}"

    def delete(self, path: str) -> None:
        # S3 deletes are idempotent; check first so callers can log misses.
        try:
            self._client.head_object(Bucket=self.bucket, Key=path)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey"):
                raise BlobNotFound(path) from e
            raise
        self._client.delete_object(Bucket=self.bucket, Key=path)


def build_blob_path(prefix: str, filename: str, now: float | None = None) -> str:
    """Returns `{prefix}/{epoch_millis}-{filename}` for a new upload."""
    millis = int((now if now is not None else time.time()) * 1000)
    safe_name = os.path.basename(filename.replace("\\", "/")) or "file"
    return f"{prefix}/{millis}-{safe_name}"


def upload_file(blob_store: BlobStore, upload: UploadedFile, prefix: str) -> UploadResult:
    """
    Writes the file under a timestamp-prefixed path, makes it public and
    returns its public URL together with the storage path.
    """
    path = build_blob_path(prefix, upload.filename)
    blob_store.save(path, upload.data, upload.content_type)
    blob_store.make_public(path)
    download_url = blob_store.public_url(path)
    logger.info("Uploaded %s (%d bytes) to %s", upload.filename, upload.size, path)
    return UploadResult(download_url=download_url, path=path)


def delete_quietly(blob_store: BlobStore, path: str | None, label: str) -> None:
    """Best-effort blob deletion: failures are logged, never raised."""
    if not path:
        return
    try:
        blob_store.delete(path)
    except Exception as e:
        logger.error("Failed to delete %s file %s: %s", label, path, e)

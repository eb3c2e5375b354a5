"""
Metadata-aware facade over the S3 bucket.

Every object carries exactly one piece of user metadata, ``original-filename``,
written together with the bytes. S3 metadata is ASCII-only, so the name is
stored percent-encoded and decoded on read. This module holds no state of its own: each
call goes straight to the bucket, so reads see whatever S3 currently serves.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from file_manager.errors import NotFoundError, StoreError
from file_manager.naming import (
    ORIGINAL_FILENAME_METADATA_KEY,
    decode_original_filename,
    encode_original_filename,
)
from file_manager.s3.delete_objects import delete_s3_object
from file_manager.s3.read_objects import (
    fetch_s3_object,
    fetch_s3_objects_metadata,
    generate_presigned_download_url,
    head_s3_object,
    is_not_found_error,
)
from file_manager.s3.write_objects import upload_s3_object

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)

DEFAULT_PRESIGNED_URL_EXPIRY_SECONDS = 3600
DELETE_ACKNOWLEDGED_STATUS_CODES = (200, 204)


@dataclass
class StoredObject:
    """One entry of a bucket listing."""
    key: str
    size: int
    last_modified: datetime


@dataclass
class ObjectHead:
    """Result of a HEAD on one object."""
    key: str
    size: int
    content_type: Optional[str] = None
    last_modified: Optional[datetime] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def original_filename(self) -> Optional[str]:
        value = self.metadata.get(ORIGINAL_FILENAME_METADATA_KEY)
        return decode_original_filename(value) if value is not None else None


@contextmanager
def translate_store_errors(operation: str, key: Optional[str] = None) -> Iterator[None]:
    """Re-raise boto errors as ``NotFoundError`` (missing key) or ``StoreError`` (anything else)."""
    try:
        yield
    except ClientError as err:
        if key is not None and is_not_found_error(err):
            raise NotFoundError(key) from err
        logger.error(f"S3 {operation} failed for key={key}: {err}")
        raise StoreError(f"Failed to {operation}: {err}") from err
    except BotoCoreError as err:
        logger.error(f"S3 {operation} failed for key={key}: {err}")
        raise StoreError(f"Failed to {operation}: {err}") from err


class MetadataStore:
    """Reads and writes objects together with their ``original-filename`` metadata."""

    def __init__(
        self,
        s3_client: "S3Client",
        bucket_name: str,
        presigned_url_expiry_seconds: int = DEFAULT_PRESIGNED_URL_EXPIRY_SECONDS,
    ):
        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.presigned_url_expiry_seconds = presigned_url_expiry_seconds

    def put(self, key: str, content: bytes, content_type: Optional[str], original_filename: str) -> str:
        """Write (or overwrite) ``key`` with ``content`` and its original filename."""
        logger.info(f"Uploading {key} ({len(content)} bytes) with original filename {original_filename}")
        with translate_store_errors("upload file"):
            upload_s3_object(
                bucket_name=self.bucket_name,
                object_key=key,
                file_content=content,
                content_type=content_type,
                metadata={ORIGINAL_FILENAME_METADATA_KEY: encode_original_filename(original_filename)},
                s3_client=self.s3_client,
            )
        return key

    def get(self, key: str) -> bytes:
        with translate_store_errors("download file", key):
            response = fetch_s3_object(self.bucket_name, object_key=key, s3_client=self.s3_client)
            return response["Body"].read()

    def head(self, key: str) -> ObjectHead:
        with translate_store_errors("read file metadata", key):
            response = head_s3_object(self.bucket_name, object_key=key, s3_client=self.s3_client)
        return ObjectHead(
            key=key,
            size=response.get("ContentLength", 0),
            content_type=response.get("ContentType"),
            last_modified=response.get("LastModified"),
            metadata=dict(response.get("Metadata", {})),
        )

    def delete(self, key: str) -> bool:
        """
        Delete ``key``.

        Idempotent: S3 acknowledges deletes of keys that are already gone.
        Store failures are raised, not reported as ``False``.
        """
        with translate_store_errors("delete file"):
            response = delete_s3_object(self.bucket_name, object_key=key, s3_client=self.s3_client)
        status_code = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        deleted = status_code in DELETE_ACKNOWLEDGED_STATUS_CODES
        logger.info(f"Delete of {key} returned HTTP {status_code}")
        return deleted

    def list(self) -> List[StoredObject]:
        with translate_store_errors("list files"):
            entries = fetch_s3_objects_metadata(self.bucket_name, s3_client=self.s3_client)
        return [
            StoredObject(key=entry["Key"], size=entry["Size"], last_modified=entry["LastModified"])
            for entry in entries
        ]

    def presign_download(self, key: str) -> str:
        """Sign a download URL for ``key``; raises ``NotFoundError`` rather than signing a dead link."""
        self.head(key)
        return self.sign_download(key)

    def sign_download(self, key: str) -> str:
        """Sign a download URL for ``key`` without checking that it exists."""
        with translate_store_errors("generate download URL", key):
            return generate_presigned_download_url(
                self.bucket_name,
                object_key=key,
                expires_in=self.presigned_url_expiry_seconds,
                s3_client=self.s3_client,
            )

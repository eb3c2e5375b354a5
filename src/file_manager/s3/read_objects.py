"""Functions for reading objects from an S3 bucket--the "R" in CRUD."""

from typing import TYPE_CHECKING, List, Optional

from botocore.exceptions import ClientError

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client
    from mypy_boto3_s3.type_defs import (
        GetObjectOutputTypeDef,
        HeadObjectOutputTypeDef,
        ObjectTypeDef,
    )

DEFAULT_MAX_KEYS = 1_000
NOT_FOUND_ERROR_CODES = ("404", "NoSuchKey", "NotFound")


def is_not_found_error(err: ClientError) -> bool:
    """Whether a ``ClientError`` means the key is absent."""
    return err.response.get("Error", {}).get("Code") in NOT_FOUND_ERROR_CODES


def head_s3_object(
    bucket_name: str,
    object_key: str,
    *,
    s3_client: "S3Client",
) -> "HeadObjectOutputTypeDef":
    """
    Fetch the size, content type and user metadata of an object without its body.

    :raises ClientError: with code ``404`` if the object does not exist.
    """
    return s3_client.head_object(Bucket=bucket_name, Key=object_key)


def fetch_s3_object(
    bucket_name: str,
    object_key: str,
    *,
    s3_client: "S3Client",
) -> "GetObjectOutputTypeDef":
    """
    Fetch metadata of an object in the S3 bucket.

    :param bucket_name: Name of the S3 bucket.
    :param object_key: Key of the object to fetch.
    :param s3_client: The S3 client to use.

    :return: Metadata of the object, with the streaming ``Body``.
    """
    return s3_client.get_object(Bucket=bucket_name, Key=object_key)


def fetch_s3_objects_metadata(
    bucket_name: str,
    prefix: Optional[str] = None,
    max_keys: int = DEFAULT_MAX_KEYS,
    *,
    s3_client: "S3Client",
) -> List["ObjectTypeDef"]:
    """
    Fetch the listing entries of every object in the bucket, following continuation tokens.

    :param bucket_name: Name of the S3 bucket to list objects from.
    :param prefix: Prefix to filter objects by.
    :param max_keys: Page size requested from S3 on each call.
    :param s3_client: The S3 client to use.

    :return: Listing entries (``Key``, ``Size``, ``LastModified``, ...) in S3 listing order.
    """
    paginator = s3_client.get_paginator("list_objects_v2")
    page_kwargs = {"Bucket": bucket_name, "PaginationConfig": {"PageSize": max_keys}}
    if prefix:
        page_kwargs["Prefix"] = prefix

    objects: List["ObjectTypeDef"] = []
    for page in paginator.paginate(**page_kwargs):
        objects.extend(page.get("Contents", []))
    return objects


def generate_presigned_download_url(
    bucket_name: str,
    object_key: str,
    expires_in: int,
    *,
    s3_client: "S3Client",
) -> str:
    """
    Sign a credential-free GET URL for one object.

    Signing happens locally; it does not check the object exists.
    """
    return s3_client.generate_presigned_url(
        ClientMethod="get_object",
        Params={"Bucket": bucket_name, "Key": object_key},
        ExpiresIn=expires_in,
    )

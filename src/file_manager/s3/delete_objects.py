"""Functions for deleting objects from an S3 bucket--the "D" in CRUD."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client
    from mypy_boto3_s3.type_defs import DeleteObjectOutputTypeDef


def delete_s3_object(
    bucket_name: str,
    object_key: str,
    *,
    s3_client: "S3Client",
) -> "DeleteObjectOutputTypeDef":
    """
    Delete an object from an S3 bucket.

    S3 answers a delete of a missing key with success, so this is idempotent.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: key of the object in the S3 bucket.
    :param s3_client: The boto3 S3 client to use.
    :return: The raw ``DeleteObject`` response.
    """
    return s3_client.delete_object(Bucket=bucket_name, Key=object_key)

"""Object store client construction."""
import logging
import os
from typing import TYPE_CHECKING, Optional

import boto3
from botocore.config import Config

from file_manager.settings import Settings, get_settings

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)


def create_s3_client(settings: Optional[Settings] = None) -> "S3Client":
    """Create an S3 client configured from settings.

    In ``aws-prod`` an ``AWS_PROFILE`` (e.g. SSO) takes precedence; otherwise
    explicit credentials and, for local modes, the moto endpoint are used.
    """
    settings = settings or get_settings()
    mode = settings.deployment_mode

    client_config = Config(
        region_name=settings.aws_region,
        s3={"addressing_style": "path" if settings.s3_force_path_style else "auto"},
    )

    aws_profile = os.environ.get("AWS_PROFILE")
    if aws_profile and mode == "aws-prod":
        logger.info(f"Creating S3 client using profile: {aws_profile}")
        session = boto3.Session(profile_name=aws_profile)
        return session.client("s3", config=client_config)

    client_kwargs = {}
    if settings.aws_access_key_id:
        client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
    if settings.aws_secret_access_key:
        client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key

    # Add endpoint URL for local/mock modes
    if settings.aws_endpoint_url and mode in ["local-dev", "aws-mock"]:
        client_kwargs["endpoint_url"] = settings.aws_endpoint_url

    logger.info(f"Creating S3 client (mode={mode}, region={settings.aws_region}, "
                f"endpoint={client_kwargs.get('endpoint_url')})")
    return boto3.client("s3", config=client_config, **client_kwargs)

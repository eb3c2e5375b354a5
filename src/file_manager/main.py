from textwrap import dedent
import logging
from typing import TYPE_CHECKING, Optional

import pydantic
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from file_manager.aws_clients import create_s3_client
from file_manager.errors import (
    InvalidArgumentError,
    NotFoundError,
    StoreError,
    handle_broad_exceptions,
    handle_invalid_argument_errors,
    handle_not_found_errors,
    handle_pydantic_validation_errors,
    handle_store_errors,
)
from file_manager.registry import FileRegistry
from file_manager.routers.files import router as files_router
from file_manager.routers.health import router as health_router
from file_manager.settings import Settings
from file_manager.status_tracker import UploadStatusTracker
from file_manager.storage import MetadataStore

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

# Set up logging
logger = logging.getLogger(__name__)


def configure_logging(log_level: str) -> None:
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logging.getLogger("file_manager").setLevel(log_level)


def create_app(settings: Optional[Settings] = None, s3_client: Optional["S3Client"] = None) -> FastAPI:
    """Create a FastAPI application."""
    settings = settings or Settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="File Manager API",
        summary="Store, search and share files in an S3 bucket",
        version="v1",
        description=dedent(
            """\
        | Helpful Links | Notes |
        | --- | --- |
        | [FastAPI Documentation](https://fastapi.tiangolo.com/) | |
        | [S3 user metadata](https://docs.aws.amazon.com/AmazonS3/latest/userguide/UsingMetadata.html) | original filenames live in `x-amz-meta-original-filename` |
        """
        ),
        docs_url="/",  # its easier to find the docs when they live on the base url
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Process-wide state: one registry (and its upload status table) per app
    store = MetadataStore(
        s3_client=s3_client or create_s3_client(settings),
        bucket_name=settings.s3_bucket_name,
        presigned_url_expiry_seconds=settings.presigned_url_expiry_seconds,
    )
    app.state.settings = settings
    app.state.file_registry = FileRegistry(store, status_tracker=UploadStatusTracker())
    logger.info(f"File registry ready on bucket {settings.s3_bucket_name} ({settings.deployment_mode})")

    app.include_router(files_router, prefix="/api", tags=["files"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(NotFoundError, handle_not_found_errors)
    app.add_exception_handler(InvalidArgumentError, handle_invalid_argument_errors)
    app.add_exception_handler(StoreError, handle_store_errors)
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)

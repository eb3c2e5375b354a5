"""Error taxonomy of the file registry and the FastAPI handlers that render it."""

import logging

import pydantic
from fastapi import (
    Request,
    status,
)
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class FileManagerError(Exception):
    """Base class for errors raised by the file registry."""


class NotFoundError(FileManagerError):
    """The requested key does not exist in the object store."""

    def __init__(self, key: str):
        super().__init__(f"File not found: {key}")
        self.key = key


class InvalidArgumentError(FileManagerError):
    """The caller supplied an empty file, an unknown conflict action or an unusable key."""


class StoreError(FileManagerError):
    """The object store failed (transport, credentials or service error)."""


async def handle_not_found_errors(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


async def handle_invalid_argument_errors(request: Request, exc: InvalidArgumentError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


async def handle_store_errors(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Object store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": [
                {
                    "msg": error["msg"],
                    "input": error["input"],
                }
                for error in errors
            ]
        },
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception:  # pylint: disable=broad-except
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

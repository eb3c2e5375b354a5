from typing import List, Optional, Union
from urllib.parse import quote

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Path,
    Query,
    Response,
    UploadFile,
    status,
)
from fastapi.responses import JSONResponse

from file_manager.conflicts import ConflictAction
from file_manager.dependencies import get_file_registry
from file_manager.registry import FileRegistry
from file_manager.schemas import (
    CancelledUploadResponse,
    ConflictDescriptor,
    DeleteFileResponse,
    FileInfo,
    ResolveConflictResponse,
    UploadFileResponse,
    UploadStatusResponse,
)

router = APIRouter()

NOT_FOUND_RESPONSE = {
    status.HTTP_404_NOT_FOUND: {
        "description": "File not found for the given `key`.",
    },
}

RESOLUTION_MESSAGES = {
    ConflictAction.REPLACE: "File replaced successfully",
    ConflictAction.KEEP_BOTH: "File uploaded with unique name (both files kept)",
}


def _read_upload(file: Optional[UploadFile]) -> bytes:
    # Endpoints are sync (run in the threadpool), so read the spooled file directly
    if file is None:
        return b""
    return file.file.read()


def _content_disposition(key: str) -> str:
    ascii_name = key.encode("ascii", "replace").decode("ascii").replace('"', "'")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(key, safe='')}"


@router.get("/files", response_model=List[FileInfo])
def list_files(registry: FileRegistry = Depends(get_file_registry)):
    """List every stored file with its original name and a presigned download URL."""
    return registry.list_files()


@router.get("/files/search", response_model=List[FileInfo])
def search_files(
    q: str = Query(..., description="Case-insensitive text to look for in filenames and keys"),
    registry: FileRegistry = Depends(get_file_registry),
):
    """Search files by original name or storage key."""
    return registry.search_files(q)


@router.post(
    "/files/upload",
    response_model=UploadFileResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "No file, or an empty file, was provided."},
        status.HTTP_409_CONFLICT: {
            "description": "A file with the same name already exists; resolve with one of the listed options.",
            "model": ConflictDescriptor,
        },
    },
)
def upload_file(
    file: Optional[UploadFile] = File(None, description="The file to upload"),
    registry: FileRegistry = Depends(get_file_registry),
):
    """
    Upload a file under a freshly generated storage key.

    Nothing is written when a file with the same original filename is already
    stored; the 409 response describes the conflict instead.
    """
    content = _read_upload(file)
    original_filename = (file.filename if file else None) or ""

    result = registry.upload_file(content, original_filename, file.content_type if file else None)
    if isinstance(result, ConflictDescriptor):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=result.model_dump(mode="json", by_alias=True),
        )

    return UploadFileResponse(
        message="File uploaded successfully",
        key=result,
        download_url=registry.get_download_url(result),
    )


@router.post(
    "/files/upload/resolve-conflict",
    response_model=Union[ResolveConflictResponse, CancelledUploadResponse],
    responses={
        status.HTTP_400_BAD_REQUEST: {
            "description": "Empty file, unknown action, or replace without a usable `existingKey`.",
        },
    },
)
def resolve_upload_conflict(
    file: Optional[UploadFile] = File(None, description="The file to upload"),
    action: Optional[str] = Form(None, description="One of `cancel`, `replace` or `keepBoth`"),
    existing_key: Optional[str] = Form(None, alias="existingKey", description="Key to overwrite on `replace`"),
    registry: FileRegistry = Depends(get_file_registry),
):
    """Settle a conflict reported by `POST /api/files/upload`."""
    content = _read_upload(file)
    original_filename = (file.filename if file else None) or ""
    conflict_action = ConflictAction.parse(action)

    key = registry.resolve_conflict(
        content,
        original_filename,
        conflict_action,
        existing_key=existing_key,
        content_type=file.content_type if file else None,
    )
    if key is None:
        return CancelledUploadResponse()

    message = RESOLUTION_MESSAGES[conflict_action]
    return ResolveConflictResponse(
        message=message,
        key=key,
        download_url=registry.get_download_url(key),
        action=conflict_action,
    )


@router.get(
    "/files/download/{key:path}",
    responses={
        **NOT_FOUND_RESPONSE,
        status.HTTP_200_OK: {
            "description": "The file content.",
            "content": {
                "application/octet-stream": {
                    "schema": {"type": "string", "format": "binary"},
                },
            },
        },
    },
)
def download_file(
    key: str = Path(..., description="The storage key of the file to download"),
    registry: FileRegistry = Depends(get_file_registry),
) -> Response:
    """Download the raw bytes of a file as an attachment."""
    content = registry.download_file(key)
    return Response(
        content=content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": _content_disposition(key)},
    )


@router.get("/files/status/{key:path}", response_model=UploadStatusResponse)
def get_upload_status(
    key: str = Path(..., description="The storage key returned by an upload"),
    registry: FileRegistry = Depends(get_file_registry),
):
    """
    Report whether the upload of `key` has completed.

    The first poll after completion answers `true` and clears the flag;
    every later poll answers `false`.
    """
    return UploadStatusResponse(completed=registry.get_upload_status(key))


@router.delete("/files/{key:path}", response_model=DeleteFileResponse, responses=NOT_FOUND_RESPONSE)
def delete_file(
    key: str = Path(..., description="The storage key of the file to delete"),
    registry: FileRegistry = Depends(get_file_registry),
):
    """Delete a file. Deleting a key that is already gone succeeds."""
    if not registry.delete_file(key):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"File '{key}' was not deleted")
    return DeleteFileResponse(message="File deleted successfully")

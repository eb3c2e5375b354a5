####################################
# --- Request/response schemas --- #
####################################

from datetime import datetime
from typing import Dict

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)
from pydantic.alias_generators import to_camel

from file_manager.conflicts import CONFLICT_OPTIONS, ConflictAction


class CamelModel(BaseModel):
    """Serializes with camelCase field names, accepts either spelling on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileInfo(CamelModel):
    """A stored file as shown to users."""
    key: str = Field(
        description="The storage key of the file.",
        json_schema_extra={"example": "report_1718000000000.pdf"},
    )
    original_name: str = Field(
        description="The filename the file was uploaded under.",
        json_schema_extra={"example": "report.pdf"},
    )
    size: int = Field(description="The size of the file in bytes.")
    last_modified: datetime = Field(description="The last modified date of the file.")
    download_url: str = Field(description="Presigned URL to download the file, valid for a limited time.")


class ConflictDescriptor(CamelModel):
    """Response model for `POST /api/files/upload` when the filename is already taken."""
    conflict: bool = True
    message: str = "A file with the same name already exists"
    original_filename: str
    existing_key: str
    options: Dict[str, str] = Field(default_factory=lambda: dict(CONFLICT_OPTIONS))

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "conflict": True,
                "message": "A file with the same name already exists",
                "originalFilename": "report.pdf",
                "existingKey": "report_1718000000000.pdf",
                "options": CONFLICT_OPTIONS,
            }
        }
    )


class UploadFileResponse(CamelModel):
    """Response model for a successful `POST /api/files/upload`."""
    message: str = Field(description="A message about the operation.")
    key: str = Field(description="The storage key the file was written to.")
    download_url: str


class ResolveConflictResponse(UploadFileResponse):
    """Response model for `POST /api/files/upload/resolve-conflict` when a file was written."""
    action: ConflictAction


class CancelledUploadResponse(CamelModel):
    """Response model for `POST /api/files/upload/resolve-conflict` with `action=cancel`."""
    message: str = "Upload cancelled by user"
    cancelled: bool = True


class DeleteFileResponse(CamelModel):
    """Response model for `DELETE /api/files/:key`."""
    message: str


class UploadStatusResponse(CamelModel):
    """Response model for `GET /api/files/status/:key`."""
    completed: bool


class HealthResponse(CamelModel):
    status: str
    deployment_mode: str
    components: Dict[str, str]
    ready: bool

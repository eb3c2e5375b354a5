from fastapi import Request

from file_manager.registry import FileRegistry
from file_manager.settings import Settings


def get_settings_from_app(request: Request) -> Settings:
    """Settings the running app was created with."""
    return request.app.state.settings


def get_file_registry(request: Request) -> FileRegistry:
    """The process-wide registry created at startup."""
    return request.app.state.file_registry

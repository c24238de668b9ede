"""Pydantic schemas for API requests and responses."""

from server.schemas.common import ErrorResponse, MessageResponse
from server.schemas.files import FileRecordResponse, UploadedFile, UploadResponse
from server.schemas.server import (
    FetchRequest,
    FetchResponse,
    InfoResponse,
    LogEntryResponse,
    RemoteFileResponse,
    ScanResponse,
    ToggleResponse,
)

__all__ = [
    "ErrorResponse",
    "MessageResponse",
    "FileRecordResponse",
    "UploadedFile",
    "UploadResponse",
    "FetchRequest",
    "FetchResponse",
    "InfoResponse",
    "LogEntryResponse",
    "RemoteFileResponse",
    "ScanResponse",
    "ToggleResponse",
]

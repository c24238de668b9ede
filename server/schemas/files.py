"""Pydantic schemas for file operation endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from common.types import FileRecord


class FileRecordResponse(BaseModel):
    """Response model for one shared file."""
    name: str
    size: int
    modified: str
    url: str

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileRecordResponse":
        return cls(
            name=record.name,
            size=record.size,
            modified=record.modified_at.isoformat(),
            url=record.url,
        )


class UploadedFile(BaseModel):
    """Metadata of a stored upload."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    original_name: str = Field(alias="originalName")
    size: int


class UploadResponse(BaseModel):
    """Response model for file upload."""
    message: str
    file: UploadedFile

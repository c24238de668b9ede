"""Pydantic schemas for server status, logs, discovery and peer fetch."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from common.types import ConnectionLogEntry


class InfoResponse(BaseModel):
    """Response model for server identity and status."""
    model_config = ConfigDict(populate_by_name=True)

    ip: str
    port: int
    hostname: str
    is_active: bool = Field(alias="isActive")


class ToggleResponse(BaseModel):
    """Response model for a sharing toggle."""
    model_config = ConfigDict(populate_by_name=True)

    is_active: bool = Field(alias="isActive")
    message: str


class LogEntryResponse(BaseModel):
    """Response model for one connection log entry."""
    model_config = ConfigDict(populate_by_name=True)

    ip: str
    path: str
    method: str
    timestamp: str
    user_agent: str = Field(alias="userAgent")

    @classmethod
    def from_entry(cls, entry: ConnectionLogEntry) -> "LogEntryResponse":
        return cls(
            ip=entry.ip,
            path=entry.path,
            method=entry.method,
            timestamp=entry.timestamp.isoformat(),
            user_agent=entry.user_agent,
        )


class ScanResponse(BaseModel):
    """Response model for the discovery stub."""
    message: str
    info: str


class FetchRequest(BaseModel):
    """Request model for resolving a peer's manifest."""
    url: str


class RemoteFileResponse(BaseModel):
    """Response model for one file reported by a peer."""
    name: str
    size: int
    modified: str
    url: str


class FetchResponse(BaseModel):
    """Response model for a resolved peer manifest."""
    model_config = ConfigDict(populate_by_name=True)

    base_url: str = Field(alias="baseUrl")
    has_api: bool = Field(alias="hasApi")
    files: List[RemoteFileResponse]

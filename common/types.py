"""Shared data type definitions (FileRecord, ConnectionLogEntry, RemoteFileRecord)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class FileRecord:
    """
    A file physically present under the shared root.
    """
    name: str
    size: int
    modified_at: datetime
    url: str


@dataclass(frozen=True)
class ConnectionLogEntry:
    """
    One tracked request, or a synthetic SYSTEM entry for a session toggle.
    """
    ip: str
    path: str
    method: str
    timestamp: datetime
    user_agent: str


@dataclass(frozen=True)
class RemoteFileRecord:
    """
    A file reported by a peer. A size of 0 means the size is unknown.
    """
    name: str
    size: int
    modified_at: datetime
    url: str

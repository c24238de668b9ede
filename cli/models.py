"""Command request data types for the peer browser."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class ConnectCommand:
    """Resolve the manifest of a peer."""

    target: str
    port: int | None = None
    command: Literal["connect"] = "connect"


@dataclass(frozen=True)
class ListCommand:
    """Show the current peer's manifest."""

    command: Literal["ls"] = "ls"


@dataclass(frozen=True)
class RefreshCommand:
    """Resolve the current peer's manifest again."""

    command: Literal["refresh"] = "refresh"


@dataclass(frozen=True)
class DownloadCommand:
    """Download one file from the current peer."""

    filename: str
    output_path: str | None = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class DownloadAllCommand:
    """Download the current peer's files as one archive."""

    output_path: str | None = None
    command: Literal["download-all"] = "download-all"


CommandRequest = (
    ConnectCommand
    | ListCommand
    | RefreshCommand
    | DownloadCommand
    | DownloadAllCommand
)
